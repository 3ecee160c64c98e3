from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from bloodbridge.main import app
from bloodbridge.models.donor import DonorRecord
from bloodbridge.models.user import Session, UserPublic
from bloodbridge.routers.auth import get_session
from bloodbridge.services.api_client import ApiError, Credentials, get_api

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def days_ago(days: float) -> str:
    return (NOW - timedelta(days=days)).isoformat()


def make_donor(**overrides: Any) -> DonorRecord:
    fields: Dict[str, Any] = {
        "email": "donor@example.com",
        "name": "Donor",
        "bloodGroup": "O+",
        "district": "Dhaka",
        "upazila": "Savar",
        "availabilityStatus": "available",
        "status": "active",
        "role": "donor",
    }
    fields.update(overrides)
    return DonorRecord.model_validate(fields)


class FakeApi:
    """In-memory stand-in for the remote BloodBridge API."""

    def __init__(self) -> None:
        self.donors: List[Dict[str, Any]] = []
        self.requests: List[Dict[str, Any]] = []
        self.details: Dict[str, Dict[str, Any]] = {}
        self.history: List[Dict[str, Any]] = []
        self.created: List[Dict[str, Any]] = []
        self.status_updates: List[Dict[str, Any]] = []
        self.create_response: Dict[str, Any] = {"insertedId": "req-1", "acknowledged": True}
        self.status_response: Dict[str, Any] = {"modifiedCount": 1, "matchedCount": 1}
        self.mine: List[Dict[str, Any]] = []
        self.edits: List[Dict[str, Any]] = []
        self.deleted: List[str] = []
        self.assignments: List[Dict[str, Any]] = []
        self.add_donor_response: Dict[str, Any] = {"insertedId": "donor-1"}
        self.users: List[Dict[str, Any]] = []
        self.user_changes: List[Dict[str, Any]] = []
        self.donors_error: Optional[ApiError] = None
        self.details_error: Optional[ApiError] = None

    async def get_donors(self) -> List[Dict[str, Any]]:
        if self.donors_error:
            raise self.donors_error
        return list(self.donors)

    async def get_donor_history(self, email: str, credentials: Credentials = Credentials()) -> List[Dict[str, Any]]:
        return [item for item in self.history if item.get("donorEmail") == email]

    async def get_public_stats(self) -> Dict[str, Any]:
        return {"donors": len(self.donors), "requests": len(self.requests)}

    async def get_public_requests(self) -> List[Dict[str, Any]]:
        return list(self.requests)

    async def get_request_details(self, request_id: str, credentials: Credentials = Credentials()) -> Optional[Dict[str, Any]]:
        if self.details_error:
            raise self.details_error
        return self.details.get(request_id)

    async def create_donation_request(self, payload: Dict[str, Any], credentials: Credentials = Credentials()) -> Dict[str, Any]:
        self.created.append(payload)
        return self.create_response

    async def update_donation_status(self, body: Dict[str, Any], credentials: Credentials = Credentials()) -> Dict[str, Any]:
        self.status_updates.append(body)
        return self.status_response

    async def get_my_requests(self, credentials: Credentials) -> List[Dict[str, Any]]:
        return list(self.mine)

    async def get_all_requests(self, credentials: Credentials) -> List[Dict[str, Any]]:
        return list(self.requests)

    async def get_donation_request(self, request_id: str, credentials: Credentials) -> Optional[Dict[str, Any]]:
        return self.details.get(request_id)

    async def update_donation_request(self, request_id: str, body: Dict[str, Any], credentials: Credentials) -> Dict[str, Any]:
        self.edits.append({"id": request_id, **body})
        return {"matchedCount": 1, "modifiedCount": 0}

    async def delete_donation_request(self, request_id: str, credentials: Credentials = Credentials()) -> Dict[str, Any]:
        self.deleted.append(request_id)
        return {"deletedCount": 1}

    async def add_donor(self, body: Dict[str, Any], credentials: Credentials = Credentials()) -> Dict[str, Any]:
        self.assignments.append(body)
        return self.add_donor_response

    async def find_donor(self, donation_id: str, credentials: Credentials = Credentials()) -> List[Dict[str, Any]]:
        return [item for item in self.assignments if item.get("donationId") == donation_id]

    async def get_users(self, credentials: Credentials) -> List[Dict[str, Any]]:
        return list(self.users)

    async def update_user_role(self, email: str, role: str, credentials: Credentials) -> Dict[str, Any]:
        self.user_changes.append({"email": email, "role": role})
        return {"modifiedCount": 1}

    async def update_user_status(self, email: str, status: str, credentials: Credentials) -> Dict[str, Any]:
        self.user_changes.append({"email": email, "status": status})
        return {"modifiedCount": 1}

    async def update_user(self, user_id: str, body: Dict[str, Any], credentials: Credentials) -> Dict[str, Any]:
        self.user_changes.append({"id": user_id, **body})
        return {"matchedCount": 1, "modifiedCount": 1}


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def session_state() -> Dict[str, Session]:
    return {"session": Session()}


@pytest.fixture
def client(fake_api: FakeApi, session_state: Dict[str, Session]):
    app.dependency_overrides[get_api] = lambda: fake_api
    app.dependency_overrides[get_session] = lambda: session_state["session"]
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def signed_in(role: str = "donor", status: str = "active", email: str = "requester@example.com") -> Session:
    user = UserPublic(_id="u-1", email=email, name="Rahim Uddin", role=role, status=status)
    return Session(user=user, role=role, status=status)
