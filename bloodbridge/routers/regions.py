from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException, status

from ..models.region import District, Upazila
from ..services.regions import get_district, list_districts, thanas_for, upazilas_for

router = APIRouter(prefix="/regions", tags=["regions"])


@router.get("/districts", response_model=List[District])
async def districts() -> List[District]:
    return list_districts()


@router.get("/districts/{district_id}", response_model=District)
async def district(district_id: str) -> District:
    found = get_district(district_id)
    if found is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="District not found")
    return found


@router.get("/districts/{district_id}/upazilas", response_model=List[Upazila])
async def upazilas(district_id: str) -> List[Upazila]:
    if get_district(district_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="District not found")
    return upazilas_for(district_id)


@router.get("/thanas", response_model=List[str])
async def thanas(district: str, upazila: str) -> List[str]:
    return thanas_for(district, upazila)
