from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..models.donor import BloodGroupShare, DonorHistory, DonorRecord, DonorSearchFilters
from ..models.user import Session
from ..routers.auth import get_credentials, require_roles
from ..routers.donation_requests import upstream_error
from ..schemas.donor import parse_donors
from ..services.api_client import ApiError, BloodBridgeApi, Credentials, get_api
from ..services.donation_requests import STAFF_ROLES
from ..services.search import blood_group_distribution, donation_badge, search_donors

router = APIRouter(prefix="/donors", tags=["donors"])


async def _directory(api: BloodBridgeApi, context: str) -> List[DonorRecord]:
    try:
        return parse_donors(await api.get_donors())
    except ApiError as exc:
        raise upstream_error(context, exc) from exc


@router.get("/search", response_model=List[DonorRecord])
async def search(
    blood_group: str = Query("", alias="bloodGroup"),
    district: str = "",
    upazila: str = "",
    thana: str = "",
    availability: str = "",
    api: BloodBridgeApi = Depends(get_api),
) -> List[DonorRecord]:
    filters = DonorSearchFilters(
        blood_group=blood_group,
        district=district,
        upazila=upazila,
        thana=thana,
        availability=availability,
    )
    return search_donors(await _directory(api, "search_donors"), filters)


@router.get("/stats", response_model=List[BloodGroupShare])
async def stats(api: BloodBridgeApi = Depends(get_api)) -> List[BloodGroupShare]:
    return blood_group_distribution(await _directory(api, "donor_stats"))


@router.get("/public-stats")
async def public_stats(api: BloodBridgeApi = Depends(get_api)) -> Dict[str, Any]:
    try:
        return await api.get_public_stats()
    except ApiError as exc:
        raise upstream_error("public_stats", exc) from exc


@router.get("/{email}/history", response_model=DonorHistory)
async def history(
    email: str,
    session: Session = Depends(require_roles("donor", *STAFF_ROLES)),
    credentials: Credentials = Depends(get_credentials),
    api: BloodBridgeApi = Depends(get_api),
) -> DonorHistory:
    own = email.lower() == session.user.email.lower()
    if not own and session.role not in STAFF_ROLES:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Donors can only view their own history")
    try:
        donations = await api.get_donor_history(email, credentials)
    except ApiError as exc:
        raise upstream_error("donor_history", exc) from exc
    count = len(donations)
    return DonorHistory(email=email, donations=donations, donation_count=count, badge=donation_badge(count))
