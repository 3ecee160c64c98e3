from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter

from ..services import directory

router = APIRouter(prefix="/directory", tags=["directory"])


@router.get("/ambulances")
async def ambulances(division: Optional[str] = None) -> List[Dict[str, Any]]:
    return directory.ambulances(division)


@router.get("/clinics")
async def clinics(division: Optional[str] = None) -> List[Dict[str, Any]]:
    return directory.clinics(division)


@router.get("/doctors")
async def doctors(division: Optional[str] = None) -> List[Dict[str, Any]]:
    return directory.doctors(division)


@router.get("/ngos")
async def ngos(division: Optional[str] = None) -> List[Dict[str, Any]]:
    return directory.ngos(division)


@router.get("/urgency")
async def urgency() -> List[Dict[str, Any]]:
    return directory.urgency_definitions()


@router.get("/badges")
async def badges() -> List[Dict[str, Any]]:
    return directory.reward_badges()


@router.get("/health-education")
async def health_education() -> List[Dict[str, Any]]:
    return directory.health_education()
