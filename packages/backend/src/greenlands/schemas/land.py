"""Pydantic schemas for land parcels."""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, field_validator

from greenlands.schemas.base import CamelModel
from greenlands.schemas.user import FarmerRef

SoilType = Literal["Loamy", "Clay", "Sandy", "Silt", "Peaty", "Chalky", "Other"]
LandStatus = Literal["Active", "Planning", "Harvested", "Fallow", "Irrigated", "Other"]
IrrigationType = Literal["None", "Drip", "Sprinkler", "Flood", "Center Pivot", "Other"]

COORDINATES_MESSAGE = "Coordinates must be valid latitude and longitude values"


def validate_coordinates(v: Optional[list[float]]) -> Optional[list[float]]:
    if v is None:
        return v
    if len(v) != 2:
        raise ValueError(COORDINATES_MESSAGE)
    lat, lon = v
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        raise ValueError(COORDINATES_MESSAGE)
    return [lat, lon]


class LandDetails(CamelModel):
    """Optional agronomic, environmental and financial fields."""
    description: Optional[str] = None
    irrigation_type: Optional[IrrigationType] = None
    fertilizer_used: Optional[str] = None
    pesticide_used: Optional[str] = None
    expected_yield: Optional[float] = Field(None, ge=0)
    actual_yield: Optional[float] = Field(None, ge=0)
    planting_date: Optional[datetime] = None
    harvest_date: Optional[datetime] = None
    soil_ph: Optional[float] = Field(None, ge=0, le=14)
    soil_moisture: Optional[float] = Field(None, ge=0, le=100)
    temperature: Optional[float] = None
    rainfall: Optional[float] = Field(None, ge=0)
    investment: Optional[float] = Field(None, ge=0)
    revenue: Optional[float] = Field(None, ge=0)
    tags: Optional[list[str]] = None


class LandCreate(LandDetails):
    name: str = Field(..., min_length=1, max_length=200)
    area: float = Field(..., gt=0)
    crop: str = Field(..., min_length=1, max_length=100)
    soil_type: SoilType
    status: LandStatus = "Active"
    coordinates: list[float]

    _check_coordinates = field_validator("coordinates")(validate_coordinates)


class LandUpdate(LandDetails):
    """Full update of the core fields; status and coordinates optional."""
    name: str = Field(..., min_length=1, max_length=200)
    area: float = Field(..., gt=0)
    crop: str = Field(..., min_length=1, max_length=100)
    soil_type: SoilType
    status: Optional[LandStatus] = None
    coordinates: Optional[list[float]] = None

    _check_coordinates = field_validator("coordinates")(validate_coordinates)


class LandRead(CamelModel):
    id: uuid.UUID
    name: str
    area: float
    crop: str
    soil_type: str
    status: str
    coordinates: list[float]
    farmer: FarmerRef
    last_updated: datetime
    description: Optional[str] = None
    irrigation_type: Optional[str] = None
    fertilizer_used: Optional[str] = None
    pesticide_used: Optional[str] = None
    expected_yield: Optional[float] = None
    actual_yield: Optional[float] = None
    planting_date: Optional[datetime] = None
    harvest_date: Optional[datetime] = None
    soil_ph: Optional[float] = None
    soil_moisture: Optional[float] = None
    temperature: Optional[float] = None
    rainfall: Optional[float] = None
    investment: Optional[float] = None
    revenue: Optional[float] = None
    tags: list[str] = Field(default_factory=list)
    area_in_hectares: float
    yield_per_acre: Optional[float] = None
    profit: Optional[float] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
