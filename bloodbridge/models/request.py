from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import ConfigDict, Field, field_validator

from .base import CamelModel
from .donor import BLOOD_GROUPS, DonorRecommendation


UrgencyLevel = Literal["critical", "urgent", "flexible"]
UrgencyFilter = Literal["all", "critical", "urgent", "flexible"]
DonationStatus = Literal["pending", "inprogress", "done", "canceled"]
StatusFilter = Literal["all", "pending", "inprogress", "done", "canceled"]

DEFAULT_URGENCY: UrgencyLevel = "urgent"


class GeoPoint(CamelModel):
    lat: float
    lng: float


class DonationRequestForm(CamelModel):
    """The in-progress "create donation request" form.

    ``recipient_district`` holds the district *id* picked from the region
    table; it is swapped for the display name when the request is submitted.
    """

    requester_name: str = ""
    requester_email: str = ""
    recipient_name: str
    recipient_district: str
    recipient_upazila: str
    hospital_name: str = ""
    full_address: str = ""
    blood_group: str
    donation_date: str = ""
    donation_time: str = ""
    request_message: str = ""
    urgency_level: UrgencyLevel = "critical"
    units_needed: int = Field(default=1, ge=1)
    patient_condition: str = ""
    hospital_phone: str = ""
    needs_ambulance: bool = True

    @field_validator("blood_group")
    @classmethod
    def known_blood_group(cls, value: str) -> str:
        if value not in BLOOD_GROUPS:
            raise ValueError(f"Unknown blood group {value!r}")
        return value


class SuggestionQuery(CamelModel):
    blood_group: str = ""
    recipient_district: str = ""
    recipient_upazila: str = ""


class DonationRequestPayload(CamelModel):
    requester_name: str
    requester_email: str
    recipient_name: str
    recipient_district: str
    recipient_upazila: str
    hospital_name: str
    full_address: str
    blood_group: str
    donation_date: str
    donation_time: str
    request_message: str
    urgency_level: UrgencyLevel
    units_needed: int
    patient_condition: str
    hospital_phone: str
    needs_ambulance: bool
    donation_status: DonationStatus = "pending"
    location_geo: Optional[GeoPoint] = None
    ai_recommendations: List[DonorRecommendation] = Field(default_factory=list)


class DonationRequest(CamelModel):
    """A request as returned by the remote API; unknown fields are kept."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = Field(default=None, alias="_id")
    requester_name: Optional[str] = None
    requester_email: Optional[str] = None
    recipient_name: Optional[str] = None
    recipient_district: Optional[str] = None
    recipient_upazila: Optional[str] = None
    blood_group: Optional[str] = None
    urgency_level: Optional[str] = None
    donation_status: Optional[str] = None
    ai_recommendations: List[DonorRecommendation] = Field(default_factory=list)
    is_owner: bool = False

    @field_validator("ai_recommendations", mode="before")
    @classmethod
    def recommendations_list(cls, value: Any) -> Any:
        return value if isinstance(value, list) else []


class SubmissionResult(CamelModel):
    inserted_id: Optional[str] = None
    acknowledged: bool = False
    ai_recommendations: List[DonorRecommendation] = Field(default_factory=list)
    message: str = "Donation request submitted successfully!"


class DonationRequestEdit(CamelModel):
    """Editable request fields. Requester email and status are kept from the stored request."""

    requester_name: str = ""
    recipient_name: str
    recipient_district: str
    recipient_upazila: str
    hospital_name: str = ""
    full_address: str = ""
    blood_group: str
    donation_date: str = ""
    donation_time: str = ""
    request_message: str = ""

    @field_validator("blood_group")
    @classmethod
    def known_blood_group(cls, value: str) -> str:
        if value not in BLOOD_GROUPS:
            raise ValueError(f"Unknown blood group {value!r}")
        return value


class DonationStatusUpdate(CamelModel):
    donation_status: DonationStatus

    def to_remote(self, request_id: str) -> dict[str, Any]:
        return {"id": request_id, "donationStatus": self.donation_status}


class DonorAssignment(CamelModel):
    """The donor who volunteered for a request, as stored by the remote API."""

    model_config = ConfigDict(extra="allow")

    donor_name: Optional[str] = None
    donor_email: Optional[str] = None
    donation_id: Optional[str] = None
    created_at: Any = None


class VolunteerResult(CamelModel):
    id: str
    donation_status: DonationStatus = "inprogress"
    donor_saved: bool
    message: str


class ChangeResult(CamelModel):
    id: str
    modified: bool
