from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from loguru import logger

from ..config import settings


class ApiError(Exception):
    """A failed call to the remote BloodBridge API."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message

    @property
    def is_auth_error(self) -> bool:
        return self.status_code in (401, 403)


@dataclass
class Credentials:
    token: Optional[str] = None
    cookies: Dict[str, str] = field(default_factory=dict)

    @property
    def present(self) -> bool:
        return bool(self.token or self.cookies)

    def headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}


ANONYMOUS = Credentials()


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason or f"HTTP {response.status_code}"


class BloodBridgeApi:
    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.api_timeout_s
        self.session = session or requests.Session()

    def _request(
        self,
        method: str,
        path: str,
        credentials: Credentials = ANONYMOUS,
        json: Any = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method,
                url,
                json=json,
                params=params,
                headers=credentials.headers(),
                cookies=credentials.cookies or None,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("{} {} failed: {}", method, url, exc)
            raise ApiError(503, f"BloodBridge API unreachable: {exc}") from exc

        if response.status_code >= 400:
            raise ApiError(response.status_code, _error_message(response))
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(502, f"Invalid JSON from {path}") from exc

    async def _call(
        self,
        method: str,
        path: str,
        credentials: Credentials = ANONYMOUS,
        json: Any = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, partial(self._request, method, path, credentials, json, params)
        )

    # Donor directory

    async def get_donors(self) -> List[Dict[str, Any]]:
        data = await self._call("GET", "/get-donors")
        return data if isinstance(data, list) else []

    async def get_donor_history(self, email: str, credentials: Credentials = ANONYMOUS) -> List[Dict[str, Any]]:
        data = await self._call("GET", f"/donor-history/{quote(email)}", credentials)
        return data if isinstance(data, list) else []

    async def get_public_stats(self) -> Dict[str, Any]:
        data = await self._call("GET", "/public-stats")
        return data if isinstance(data, dict) else {}

    # Donation requests

    async def get_public_requests(self) -> List[Dict[str, Any]]:
        data = await self._call("GET", "/all-donation-requests-public")
        return data if isinstance(data, list) else []

    async def get_request_details(self, request_id: str, credentials: Credentials = ANONYMOUS) -> Optional[Dict[str, Any]]:
        return await self._call("GET", f"/details/{quote(request_id)}", credentials)

    async def create_donation_request(self, payload: Dict[str, Any], credentials: Credentials = ANONYMOUS) -> Dict[str, Any]:
        data = await self._call("POST", "/create-donation-request", credentials, json=payload)
        return data if isinstance(data, dict) else {}

    async def update_donation_status(self, body: Dict[str, Any], credentials: Credentials = ANONYMOUS) -> Dict[str, Any]:
        data = await self._call("PATCH", "/donation-status", credentials, json=body)
        return data if isinstance(data, dict) else {}

    async def get_my_requests(self, credentials: Credentials) -> List[Dict[str, Any]]:
        data = await self._call("GET", "/my-donation-request", credentials)
        return data if isinstance(data, list) else []

    async def get_all_requests(self, credentials: Credentials) -> List[Dict[str, Any]]:
        data = await self._call("GET", "/all-donation-requests", credentials)
        return data if isinstance(data, list) else []

    async def get_donation_request(self, request_id: str, credentials: Credentials) -> Optional[Dict[str, Any]]:
        return await self._call("GET", f"/get-donation-request/{quote(request_id)}", credentials)

    async def update_donation_request(
        self, request_id: str, body: Dict[str, Any], credentials: Credentials
    ) -> Dict[str, Any]:
        data = await self._call("PUT", f"/update-donation-request/{quote(request_id)}", credentials, json=body)
        return data if isinstance(data, dict) else {}

    async def delete_donation_request(self, request_id: str, credentials: Credentials = ANONYMOUS) -> Dict[str, Any]:
        data = await self._call("DELETE", f"/delete-request/{quote(request_id)}", credentials)
        return data if isinstance(data, dict) else {}

    async def add_donor(self, body: Dict[str, Any], credentials: Credentials = ANONYMOUS) -> Dict[str, Any]:
        data = await self._call("POST", "/add-donor", credentials, json=body)
        return data if isinstance(data, dict) else {}

    async def find_donor(self, donation_id: str, credentials: Credentials = ANONYMOUS) -> List[Dict[str, Any]]:
        data = await self._call("GET", "/find-donor", credentials, params={"donationId": donation_id})
        return data if isinstance(data, list) else []

    # Users

    async def get_users(self, credentials: Credentials) -> List[Dict[str, Any]]:
        data = await self._call("GET", "/get-users", credentials)
        return data if isinstance(data, list) else []

    async def update_user_role(self, email: str, role: str, credentials: Credentials) -> Dict[str, Any]:
        data = await self._call("PATCH", "/update-role", credentials, json={"email": email, "role": role})
        return data if isinstance(data, dict) else {}

    async def update_user_status(self, email: str, status: str, credentials: Credentials) -> Dict[str, Any]:
        data = await self._call("PATCH", "/update-status", credentials, json={"email": email, "status": status})
        return data if isinstance(data, dict) else {}

    async def update_user(self, user_id: str, body: Dict[str, Any], credentials: Credentials) -> Dict[str, Any]:
        data = await self._call("PATCH", f"/update-user/{quote(user_id)}", credentials, json=body)
        return data if isinstance(data, dict) else {}

    # Session

    async def get_user(self, credentials: Credentials) -> Optional[Dict[str, Any]]:
        return await self._call("GET", "/get-user", credentials)

    async def get_user_role(self, credentials: Credentials) -> str:
        data = await self._call("GET", "/get-user-role", credentials)
        return (data or {}).get("role") or ""

    async def get_user_status(self, credentials: Credentials) -> str:
        data = await self._call("GET", "/get-user-status", credentials)
        return (data or {}).get("status") or ""


api_client = BloodBridgeApi()


def get_api() -> BloodBridgeApi:
    return api_client
