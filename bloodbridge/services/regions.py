"""
Region reference data
District and upazila lookup tables used to turn form selections (ids) into
the display names stored on donor profiles and requests.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from loguru import logger

from ..config import DATA_DIR
from ..models.region import District, Upazila

DISTRICTS_FILENAME = "districts.json"
UPAZILAS_FILENAME = "upazilas.json"
THANA_DISTRICT = "Dhaka"


def _read_table(path: Path) -> list:
    if not path.exists():
        raise FileNotFoundError(f"Region table not found at {path}")
    with path.open(encoding="utf-8") as handle:
        return json.load(handle)


@lru_cache(maxsize=1)
def _load_districts() -> tuple[District, ...]:
    rows = _read_table(DATA_DIR / DISTRICTS_FILENAME)
    logger.info("Loaded {} districts", len(rows))
    return tuple(District(**row) for row in rows)


@lru_cache(maxsize=1)
def _load_upazilas() -> tuple[Upazila, ...]:
    rows = _read_table(DATA_DIR / UPAZILAS_FILENAME)
    logger.info("Loaded {} upazilas", len(rows))
    return tuple(Upazila(**row) for row in rows)


def list_districts() -> List[District]:
    return sorted(_load_districts(), key=lambda district: district.name)


def get_district(district_id: Optional[str]) -> Optional[District]:
    if not district_id:
        return None
    wanted = str(district_id)
    for district in _load_districts():
        if district.id == wanted:
            return district
    return None


def district_by_name(name: Optional[str]) -> Optional[District]:
    if not name:
        return None
    for district in _load_districts():
        if district.name == name:
            return district
    return None


def resolve_district_name(district_id: Optional[str]) -> str:
    district = get_district(district_id)
    return district.name if district else ""


def upazilas_for(district_id: Optional[str]) -> List[Upazila]:
    if not district_id:
        return []
    wanted = str(district_id)
    return [upazila for upazila in _load_upazilas() if upazila.district_id == wanted]


def thanas_for(district_name: Optional[str], upazila_name: Optional[str]) -> List[str]:
    """Thanas are only tracked for Dhaka upazilas."""
    if district_name != THANA_DISTRICT or not upazila_name:
        return []
    district = district_by_name(district_name)
    if district is None:
        return []
    for upazila in upazilas_for(district.id):
        if upazila.name == upazila_name:
            return list(upazila.thana)
    return []
