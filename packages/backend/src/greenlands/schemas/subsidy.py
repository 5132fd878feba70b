"""Schemas for subsidies and subsidy applications."""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from greenlands.schemas.base import CamelModel


class SubsidyCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    eligibility: str = Field(..., min_length=1)
    application_deadline: datetime


class SubsidyRead(CamelModel):
    id: uuid.UUID
    name: str
    description: str
    eligibility: str
    application_deadline: datetime
    created_at: datetime


class ApplyRequest(CamelModel):
    # Missing id is reported by the service as a 400 with a single message.
    subsidy_id: Optional[uuid.UUID] = None
    application_data: Optional[dict] = None


class ApplicationRead(CamelModel):
    id: uuid.UUID
    subsidy_id: uuid.UUID
    farmer_id: uuid.UUID
    application_data: Optional[dict] = None
    status: str
    reviewed_by: Optional[uuid.UUID] = None
    review_note: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class ApplyResponse(CamelModel):
    success: bool = True
    application: ApplicationRead


class ReviewRequest(CamelModel):
    status: Literal["approved", "rejected"]
    review_note: Optional[str] = None
