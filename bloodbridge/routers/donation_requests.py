from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger

from ..models.donor import ScoredDonor
from ..models.request import (
    ChangeResult,
    DonationRequest,
    DonationRequestEdit,
    DonationRequestForm,
    DonationStatusUpdate,
    DonorAssignment,
    StatusFilter,
    SubmissionResult,
    SuggestionQuery,
    UrgencyFilter,
    VolunteerResult,
)
from ..models.user import Session
from ..routers.auth import get_credentials, get_session, require_roles, require_session
from ..schemas.donor import parse_donors
from ..schemas.request import request_document
from ..services.api_client import ApiError, BloodBridgeApi, Credentials, get_api
from ..services.donation_requests import (
    STAFF_ROLES,
    build_edit,
    build_submission,
    can_manage,
    criteria_from_form,
    donor_assignment,
    ensure_can_submit,
    filter_by_status,
    filter_by_urgency,
    find_request,
    is_owner,
    submission_confirmed,
    update_acknowledged,
)
from ..services.fetch_task import FetchTask
from ..services.regions import get_district
from ..services.scoring import suggest_donors
from ..utils.logging import log_api_error

router = APIRouter(prefix="/donation-requests", tags=["donation-requests"])


def upstream_error(context: str, exc: ApiError) -> HTTPException:
    log_api_error(context, exc)
    code = exc.status_code if exc.status_code < 500 else status.HTTP_502_BAD_GATEWAY
    return HTTPException(status_code=code, detail=exc.message)


def _with_owner(raw: Dict[str, Any], session: Session) -> DonationRequest:
    email = session.user.email if session.user else None
    return DonationRequest.model_validate({**raw, "isOwner": is_owner(raw, email)})


async def _fetch_donors(api: BloodBridgeApi):
    task = FetchTask(api.get_donors, "donors")
    await task.run()
    return parse_donors(task.result_or([]))


@router.get("", response_model=List[DonationRequest])
async def list_requests(
    urgency: UrgencyFilter = "all",
    api: BloodBridgeApi = Depends(get_api),
    session: Session = Depends(get_session),
) -> List[DonationRequest]:
    task = FetchTask(api.get_public_requests, "public-requests")
    await task.run()
    requests = [item for item in task.result_or([]) if isinstance(item, dict)]
    return [_with_owner(item, session) for item in filter_by_urgency(requests, urgency)]


@router.post("/suggestions", response_model=List[ScoredDonor])
async def suggest(
    query: SuggestionQuery,
    api: BloodBridgeApi = Depends(get_api),
) -> List[ScoredDonor]:
    if not query.blood_group:
        return []
    district = get_district(query.recipient_district)
    criteria = criteria_from_form(query.blood_group, district, query.recipient_upazila)
    donors = await _fetch_donors(api)
    return suggest_donors(donors, criteria)


@router.post("", response_model=SubmissionResult, status_code=status.HTTP_201_CREATED)
async def create_request(
    form: DonationRequestForm,
    session: Session = Depends(require_session),
    credentials: Credentials = Depends(get_credentials),
    api: BloodBridgeApi = Depends(get_api),
) -> SubmissionResult:
    ensure_can_submit(session)

    user = session.user
    form = form.model_copy(
        update={
            "requester_name": form.requester_name or user.name or "",
            "requester_email": user.email,
        }
    )
    district = get_district(form.recipient_district)
    if district is None:
        logger.warning("Unknown district id {} on donation request", form.recipient_district)

    criteria = criteria_from_form(form.blood_group, district, form.recipient_upazila)
    suggestions = suggest_donors(await _fetch_donors(api), criteria)
    payload = build_submission(form, district, suggestions)

    try:
        response = await api.create_donation_request(request_document(payload), credentials)
    except ApiError as exc:
        raise upstream_error("create_request", exc) from exc
    if not submission_confirmed(response):
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Request submitted but confirmation failed",
        )

    logger.info(
        "Donation request for {} submitted by {} with {} recommendations",
        payload.blood_group,
        user.email,
        len(payload.ai_recommendations),
    )
    inserted_id = response.get("insertedId")
    return SubmissionResult(
        inserted_id=str(inserted_id) if inserted_id else None,
        acknowledged=bool(response.get("acknowledged", True)),
        ai_recommendations=payload.ai_recommendations,
    )


@router.get("/mine", response_model=List[DonationRequest])
async def my_requests(
    donation_status: StatusFilter = Query("all", alias="status"),
    session: Session = Depends(require_session),
    credentials: Credentials = Depends(get_credentials),
    api: BloodBridgeApi = Depends(get_api),
) -> List[DonationRequest]:
    try:
        requests = await api.get_my_requests(credentials)
    except ApiError as exc:
        raise upstream_error("my_requests", exc) from exc
    rows = [item for item in requests if isinstance(item, dict)]
    return [_with_owner(item, session) for item in filter_by_status(rows, donation_status)]


@router.get("/all", response_model=List[DonationRequest])
async def all_requests(
    donation_status: StatusFilter = Query("all", alias="status"),
    session: Session = Depends(require_roles(*STAFF_ROLES)),
    credentials: Credentials = Depends(get_credentials),
    api: BloodBridgeApi = Depends(get_api),
) -> List[DonationRequest]:
    try:
        requests = await api.get_all_requests(credentials)
    except ApiError as exc:
        raise upstream_error("all_requests", exc) from exc
    rows = [item for item in requests if isinstance(item, dict)]
    return [_with_owner(item, session) for item in filter_by_status(rows, donation_status)]


@router.get("/{request_id}", response_model=DonationRequest)
async def get_request(
    request_id: str,
    session: Session = Depends(get_session),
    credentials: Credentials = Depends(get_credentials),
    api: BloodBridgeApi = Depends(get_api),
) -> DonationRequest:
    try:
        details = await api.get_request_details(request_id, credentials)
    except ApiError as exc:
        if not (exc.is_auth_error and not session.is_authenticated):
            raise upstream_error("get_request", exc) from exc
        # anonymous visitors may still see requests listed publicly
        try:
            details = find_request(await api.get_public_requests(), request_id)
        except ApiError as public_exc:
            log_api_error("get_request (public fallback)", public_exc)
            raise HTTPException(status_code=exc.status_code, detail="Please log in to view request details") from exc
        if details is None:
            raise HTTPException(status_code=exc.status_code, detail="Please log in to view request details") from exc

    if not details:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Request details not found")
    return _with_owner(details, session)


async def _managed_request(
    request_id: str,
    session: Session,
    credentials: Credentials,
    api: BloodBridgeApi,
) -> Dict[str, Any]:
    try:
        existing = await api.get_donation_request(request_id, credentials)
    except ApiError as exc:
        raise upstream_error("get_donation_request", exc) from exc
    if not existing:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Request details not found")
    if not can_manage(existing, session):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the requester can change this request")
    return existing


@router.put("/{request_id}", response_model=ChangeResult)
async def edit_request(
    request_id: str,
    edit: DonationRequestEdit,
    session: Session = Depends(require_session),
    credentials: Credentials = Depends(get_credentials),
    api: BloodBridgeApi = Depends(get_api),
) -> ChangeResult:
    existing = await _managed_request(request_id, session, credentials, api)
    try:
        response = await api.update_donation_request(request_id, build_edit(existing, edit), credentials)
    except ApiError as exc:
        raise upstream_error("edit_request", exc) from exc
    return ChangeResult(id=request_id, modified=update_acknowledged(response))


@router.delete("/{request_id}")
async def delete_request(
    request_id: str,
    session: Session = Depends(require_session),
    credentials: Credentials = Depends(get_credentials),
    api: BloodBridgeApi = Depends(get_api),
) -> Dict[str, Any]:
    await _managed_request(request_id, session, credentials, api)
    try:
        response = await api.delete_donation_request(request_id, credentials)
    except ApiError as exc:
        raise upstream_error("delete_request", exc) from exc
    logger.info("Donation request {} deleted by {}", request_id, session.user.email)
    return {"id": request_id, "deleted": bool(response.get("deletedCount"))}


@router.patch("/{request_id}/status", response_model=ChangeResult)
async def update_status(
    request_id: str,
    payload: DonationStatusUpdate,
    _: Session = Depends(require_session),
    credentials: Credentials = Depends(get_credentials),
    api: BloodBridgeApi = Depends(get_api),
) -> ChangeResult:
    try:
        response = await api.update_donation_status(payload.to_remote(request_id), credentials)
    except ApiError as exc:
        raise upstream_error("update_status", exc) from exc
    return ChangeResult(id=request_id, modified=update_acknowledged(response))


@router.post("/{request_id}/volunteer", response_model=VolunteerResult)
async def volunteer(
    request_id: str,
    session: Session = Depends(require_session),
    credentials: Credentials = Depends(get_credentials),
    api: BloodBridgeApi = Depends(get_api),
) -> VolunteerResult:
    ensure_can_submit(session)
    change = DonationStatusUpdate(donation_status="inprogress")
    try:
        response = await api.update_donation_status(change.to_remote(request_id), credentials)
    except ApiError as exc:
        raise upstream_error("volunteer", exc) from exc
    if not update_acknowledged(response):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Request details not found")

    try:
        saved = await api.add_donor(donor_assignment(session, request_id), credentials)
    except ApiError as exc:
        log_api_error("volunteer (add donor)", exc)
        saved = {}

    if not saved.get("insertedId"):
        return VolunteerResult(
            id=request_id,
            donor_saved=False,
            message="Donation status updated, but donor info wasn't saved.",
        )
    logger.info("{} volunteered for donation request {}", session.user.email, request_id)
    return VolunteerResult(
        id=request_id,
        donor_saved=True,
        message=f"Thank you {session.user.name or session.user.email} for your generosity.",
    )


@router.get("/{request_id}/donor", response_model=DonorAssignment)
async def assigned_donor(
    request_id: str,
    _: Session = Depends(require_session),
    credentials: Credentials = Depends(get_credentials),
    api: BloodBridgeApi = Depends(get_api),
) -> DonorAssignment:
    try:
        donors = await api.find_donor(request_id, credentials)
    except ApiError as exc:
        raise upstream_error("assigned_donor", exc) from exc
    rows = [item for item in donors if isinstance(item, dict)]
    if not rows:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No donor has volunteered yet")
    return DonorAssignment.model_validate(rows[0])
