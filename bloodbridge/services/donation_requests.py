from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..models.donor import RequestCriteria, ScoredDonor
from ..models.region import District
from ..models.request import (
    DEFAULT_URGENCY,
    DonationRequestEdit,
    DonationRequestForm,
    DonationRequestPayload,
    GeoPoint,
)
from ..models.user import Session
from .scoring import recommendation_snapshot

STAFF_ROLES = ("admin", "volunteer")

BLOCKED_MESSAGE = (
    "Your request cannot be processed as your account is blocked. "
    "Please contact the administrator."
)


class AccountBlockedError(Exception):
    def __init__(self, message: str = BLOCKED_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


def ensure_can_submit(session: Session) -> None:
    if session.is_blocked:
        raise AccountBlockedError()


def criteria_from_form(blood_group: str, district: Optional[District], upazila: str) -> RequestCriteria:
    return RequestCriteria(
        blood_group=blood_group,
        district=district.name if district else "",
        upazila=upazila,
    )


def _location(district: Optional[District]) -> Optional[GeoPoint]:
    if district is None or district.lat is None or district.lon is None:
        return None
    return GeoPoint(lat=district.lat, lng=district.lon)


def build_submission(
    form: DonationRequestForm,
    district: Optional[District],
    suggestions: Sequence[ScoredDonor],
) -> DonationRequestPayload:
    fields = form.model_dump(exclude={"recipient_district"})
    return DonationRequestPayload(
        **fields,
        recipient_district=district.name if district else "",
        donation_status="pending",
        location_geo=_location(district),
        ai_recommendations=recommendation_snapshot(suggestions),
    )


def submission_confirmed(response: Dict[str, Any]) -> bool:
    return bool(response.get("insertedId") or response.get("acknowledged"))


def filter_by_urgency(requests: Iterable[Dict[str, Any]], level: str = "all") -> List[Dict[str, Any]]:
    if level == "all":
        return list(requests)
    return [item for item in requests if (item.get("urgencyLevel") or DEFAULT_URGENCY) == level]


def is_owner(request: Dict[str, Any], email: Optional[str]) -> bool:
    requester = request.get("requesterEmail")
    if not email or not requester:
        return False
    return requester.lower() == email.lower()


def find_request(requests: Iterable[Dict[str, Any]], request_id: str) -> Optional[Dict[str, Any]]:
    for item in requests:
        if item.get("_id") == request_id:
            return item
    return None


def filter_by_status(requests: Iterable[Dict[str, Any]], donation_status: str = "all") -> List[Dict[str, Any]]:
    if donation_status == "all":
        return list(requests)
    return [item for item in requests if item.get("donationStatus") == donation_status]


def update_acknowledged(response: Dict[str, Any]) -> bool:
    """A write counts when the remote matched the document, changed or not."""
    return bool(response.get("modifiedCount") or response.get("matchedCount"))


def can_manage(request: Dict[str, Any], session: Session) -> bool:
    email = session.user.email if session.user else None
    return session.role == "admin" or is_owner(request, email)


def build_edit(existing: Dict[str, Any], edit: DonationRequestEdit) -> Dict[str, Any]:
    body = edit.model_dump(by_alias=True)
    body["requesterName"] = edit.requester_name or existing.get("requesterName") or ""
    body["requesterEmail"] = existing.get("requesterEmail")
    body["donationStatus"] = existing.get("donationStatus") or "pending"
    return body


def donor_assignment(session: Session, request_id: str) -> Dict[str, Any]:
    user = session.user
    return {
        "donorName": user.name if user else None,
        "donorEmail": user.email if user else None,
        "donationId": request_id,
        "createdAt": datetime.now(timezone.utc).isoformat(),
    }
