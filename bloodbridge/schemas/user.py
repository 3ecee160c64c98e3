from __future__ import annotations

from typing import Any, Iterable, List

from loguru import logger
from pydantic import ValidationError

from ..models.user import UserPublic


def parse_users(raw: Iterable[Any] | None) -> List[UserPublic]:
    users: List[UserPublic] = []
    for row in raw or []:
        if not isinstance(row, dict):
            continue
        try:
            users.append(UserPublic.model_validate(row))
        except ValidationError as exc:
            logger.debug("Skipped user row {}: {}", row.get("_id"), exc.error_count())
    return users
