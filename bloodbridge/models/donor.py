from __future__ import annotations

from typing import Any, Optional

from pydantic import ConfigDict, Field, field_validator

from .base import CamelModel


BLOOD_GROUPS = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")


def _coerce_text(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    return str(value)


class DonorRecord(CamelModel):
    """A donor row from the remote directory.

    Every field is optional: remote rows are often incomplete and a missing
    field simply fails to contribute when the donor is scored or searched.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    email: Optional[str] = None
    name: Optional[str] = None
    blood_group: Optional[str] = None
    district: Optional[str] = None
    upazila: Optional[str] = None
    thana: Optional[str] = None
    availability_status: Optional[str] = None
    status: Optional[str] = None
    role: Optional[str] = None
    last_donation_date: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def as_text(cls, value: Any) -> Any:
        return _coerce_text(value)


class RequestCriteria(CamelModel):
    blood_group: str = ""
    district: str = ""
    upazila: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def blank_if_missing(cls, value: Any) -> Any:
        if value is None:
            return ""
        return _coerce_text(value)


class ScoredDonor(CamelModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    email: Optional[str] = None
    district: Optional[str] = None
    upazila: Optional[str] = None
    availability_status: Optional[str] = None
    score: int = 0


class DonorRecommendation(CamelModel):
    """One ``aiRecommendations`` entry, frozen at submission time."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    email: Optional[str] = None
    district: Optional[str] = None
    upazila: Optional[str] = None
    score: int = 0
    availability_status: Optional[str] = None


class DonorSearchFilters(CamelModel):
    blood_group: str = ""
    district: str = ""
    upazila: str = ""
    thana: str = ""
    availability: str = ""


class BloodGroupShare(CamelModel):
    name: str
    value: int
    percentage: str


class DonationBadge(CamelModel):
    label: str
    threshold: int


class DonorHistory(CamelModel):
    email: str
    donations: list[dict[str, Any]] = Field(default_factory=list)
    donation_count: int = 0
    badge: Optional[DonationBadge] = None
