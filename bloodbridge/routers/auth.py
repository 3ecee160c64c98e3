from __future__ import annotations

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger
from pydantic import ValidationError

from ..config import settings
from ..models.user import Session, UserPublic, UserRole
from ..services.api_client import BloodBridgeApi, Credentials, get_api
from ..services.fetch_task import FetchTask

router = APIRouter(prefix="/auth", tags=["auth"])
bearer_scheme = HTTPBearer(auto_error=False)


def get_credentials(
    request: Request,
    bearer: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> Credentials:
    cookies = {}
    cookie_token = request.cookies.get(settings.session_cookie_name)
    if cookie_token:
        cookies[settings.session_cookie_name] = cookie_token
    return Credentials(token=bearer.credentials if bearer else None, cookies=cookies)


async def get_session(
    credentials: Credentials = Depends(get_credentials),
    api: BloodBridgeApi = Depends(get_api),
) -> Session:
    if not credentials.present:
        return Session()

    user_task = FetchTask(lambda: api.get_user(credentials), "user")
    role_task = FetchTask(lambda: api.get_user_role(credentials), "user-role")
    status_task = FetchTask(lambda: api.get_user_status(credentials), "user-status")
    await asyncio.gather(user_task.run(), role_task.run(), status_task.run())

    raw_user = user_task.result_or({})
    if not raw_user:
        return Session()
    try:
        user = UserPublic.model_validate(raw_user)
    except ValidationError as exc:
        logger.warning("Remote user payload rejected: {}", exc)
        return Session()

    return Session(
        user=user,
        role=role_task.result_or("") or user.role or "",
        status=status_task.result_or("") or user.status or "",
    )


def require_session(session: Session = Depends(get_session)) -> Session:
    if not session.is_authenticated:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Please log in to continue")
    return session


def require_roles(*roles: UserRole):
    def dependency(session: Session = Depends(require_session)) -> Session:
        if roles and session.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions for this action",
            )
        return session

    return dependency


@router.get("/session", response_model=Session)
async def read_session(session: Session = Depends(get_session)) -> Session:
    return session
