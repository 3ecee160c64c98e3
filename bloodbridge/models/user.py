from __future__ import annotations

from typing import Literal, Optional

from pydantic import ConfigDict, Field

from .base import CamelModel


UserRole = Literal["donor", "receiver", "admin", "volunteer"]


class UserPublic(CamelModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = Field(default=None, alias="_id")
    email: str
    name: Optional[str] = None
    image: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    blood_group: Optional[str] = None
    district: Optional[str] = None
    upazila: Optional[str] = None


class Session(CamelModel):
    """Read-only view of who is calling, resolved once per HTTP request."""

    model_config = ConfigDict(frozen=True)

    user: Optional[UserPublic] = None
    role: str = ""
    status: str = ""
    is_loading: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_blocked(self) -> bool:
        return self.status == "blocked"


AccountStatus = Literal["active", "blocked"]


class RoleUpdate(CamelModel):
    email: str
    role: UserRole


class AccountStatusUpdate(CamelModel):
    email: str
    status: AccountStatus


class ProfileUpdate(CamelModel):
    """Self-service profile fields; role and status are admin-only."""

    name: Optional[str] = None
    image: Optional[str] = None
    gender: Optional[str] = None
    blood_group: Optional[str] = None
    district: Optional[str] = None
    upazila: Optional[str] = None

    def to_remote(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
