from __future__ import annotations

from typing import Any, Iterable, List

from loguru import logger
from pydantic import ValidationError

from ..models.donor import DonorRecord


def parse_donors(raw: Iterable[Any] | None) -> List[DonorRecord]:
    donors: List[DonorRecord] = []
    skipped = 0
    for row in raw or []:
        if not isinstance(row, dict):
            skipped += 1
            continue
        try:
            donors.append(DonorRecord.model_validate(row))
        except ValidationError:
            skipped += 1
    if skipped:
        logger.debug("Skipped {} malformed donor rows", skipped)
    return donors
