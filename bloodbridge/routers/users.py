from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from ..models.request import ChangeResult
from ..models.user import AccountStatusUpdate, ProfileUpdate, RoleUpdate, Session, UserPublic
from ..routers.auth import get_credentials, require_roles, require_session
from ..routers.donation_requests import upstream_error
from ..schemas.user import parse_users
from ..services.api_client import ApiError, BloodBridgeApi, Credentials, get_api
from ..services.donation_requests import update_acknowledged

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[UserPublic])
async def list_users(
    _: Session = Depends(require_roles("admin")),
    credentials: Credentials = Depends(get_credentials),
    api: BloodBridgeApi = Depends(get_api),
) -> List[UserPublic]:
    try:
        return parse_users(await api.get_users(credentials))
    except ApiError as exc:
        raise upstream_error("list_users", exc) from exc


@router.patch("/role", response_model=ChangeResult)
async def change_role(
    payload: RoleUpdate,
    session: Session = Depends(require_roles("admin")),
    credentials: Credentials = Depends(get_credentials),
    api: BloodBridgeApi = Depends(get_api),
) -> ChangeResult:
    try:
        response = await api.update_user_role(payload.email, payload.role, credentials)
    except ApiError as exc:
        raise upstream_error("change_role", exc) from exc
    logger.info("{} set role of {} to {}", session.user.email, payload.email, payload.role)
    return ChangeResult(id=payload.email, modified=update_acknowledged(response))


@router.patch("/status", response_model=ChangeResult)
async def change_status(
    payload: AccountStatusUpdate,
    session: Session = Depends(require_roles("admin")),
    credentials: Credentials = Depends(get_credentials),
    api: BloodBridgeApi = Depends(get_api),
) -> ChangeResult:
    if payload.email.lower() == session.user.email.lower():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot change your own account status")
    try:
        response = await api.update_user_status(payload.email, payload.status, credentials)
    except ApiError as exc:
        raise upstream_error("change_status", exc) from exc
    logger.info("{} set status of {} to {}", session.user.email, payload.email, payload.status)
    return ChangeResult(id=payload.email, modified=update_acknowledged(response))


@router.patch("/me", response_model=ChangeResult)
async def update_profile(
    payload: ProfileUpdate,
    session: Session = Depends(require_session),
    credentials: Credentials = Depends(get_credentials),
    api: BloodBridgeApi = Depends(get_api),
) -> ChangeResult:
    user_id = session.user.id
    if not user_id:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User data not fully loaded yet")
    body = payload.to_remote()
    if not body:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No profile fields to update")
    try:
        response = await api.update_user(user_id, body, credentials)
    except ApiError as exc:
        raise upstream_error("update_profile", exc) from exc
    return ChangeResult(id=user_id, modified=update_acknowledged(response))
