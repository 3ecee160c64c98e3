from __future__ import annotations

import json
from functools import lru_cache
from typing import Any, Dict, List, Optional

from loguru import logger

from ..config import DATA_DIR

PLATFORM_FILENAME = "platform.json"
SECTIONS = ("ambulances", "clinics", "doctors", "ngos", "urgency", "badges", "healthEducation")


@lru_cache(maxsize=1)
def _load_platform() -> Dict[str, List[Dict[str, Any]]]:
    path = DATA_DIR / PLATFORM_FILENAME
    if not path.exists():
        raise FileNotFoundError(f"Platform content not found at {path}")
    with path.open(encoding="utf-8") as handle:
        content = json.load(handle)
    missing = [section for section in SECTIONS if section not in content]
    if missing:
        raise ValueError(f"Platform content missing sections: {', '.join(missing)}")
    logger.info("Loaded platform content from {}", path)
    return content


def _section(name: str, division: Optional[str] = None) -> List[Dict[str, Any]]:
    entries = _load_platform()[name]
    if division:
        wanted = division.lower()
        entries = [entry for entry in entries if str(entry.get("division", "")).lower() == wanted]
    return [dict(entry) for entry in entries]


def ambulances(division: Optional[str] = None) -> List[Dict[str, Any]]:
    return _section("ambulances", division)


def clinics(division: Optional[str] = None) -> List[Dict[str, Any]]:
    return _section("clinics", division)


def doctors(division: Optional[str] = None) -> List[Dict[str, Any]]:
    return _section("doctors", division)


def ngos(division: Optional[str] = None) -> List[Dict[str, Any]]:
    return _section("ngos", division)


def urgency_definitions() -> List[Dict[str, Any]]:
    return _section("urgency")


def reward_badges() -> List[Dict[str, Any]]:
    return _section("badges")


def health_education() -> List[Dict[str, Any]]:
    return _section("healthEducation")
