from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class District(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    division_id: str
    name: str
    bn_name: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None

    @field_validator("id", "division_id", mode="before")
    @classmethod
    def stringify_id(cls, value):
        return str(value)


class Upazila(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    district_id: str
    name: str
    bn_name: Optional[str] = None
    thana: List[str] = Field(default_factory=list)

    @field_validator("id", "district_id", mode="before")
    @classmethod
    def stringify_id(cls, value):
        return str(value)
