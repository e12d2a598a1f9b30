"""Pydantic v2 schemas for compliance API endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.enums import (
    AccountStatus,
    DocumentType,
    OwnerType,
    ReviewAction,
    VerificationStatus,
)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class DocumentCreate(BaseModel):
    doc_type: DocumentType
    title: str = Field(..., min_length=1, max_length=255)
    file_path: str = Field(..., min_length=1, max_length=512)
    file_size: int | None = Field(None, ge=0)
    mime_type: str | None = Field(None, max_length=100)
    expiry_date: datetime | None = None
    vehicle_id: uuid.UUID | None = None


class DocumentReviewRequest(BaseModel):
    status: VerificationStatus
    notes: str | None = Field(None, max_length=1000)


class ActorReviewRequest(BaseModel):
    action: ReviewAction
    notes: str | None = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    owner_type: OwnerType
    owner_id: uuid.UUID
    doc_type: str
    title: str
    file_path: str
    file_size: int | None = None
    mime_type: str | None = None
    uploaded_by: uuid.UUID | None = None
    verification_status: str
    verified_by: uuid.UUID | None = None
    verified_at: datetime | None = None
    expiry_date: datetime | None = None
    notes: str | None = None
    created_at: datetime


class ActorSummaryResponse(BaseModel):
    """Minimal view of a driver or supplier awaiting review."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    status: AccountStatus
    compliance_status: str
    created_at: datetime


class PendingReviewsResponse(BaseModel):
    drivers: list[ActorSummaryResponse] = Field(default_factory=list)
    suppliers: list[ActorSummaryResponse] = Field(default_factory=list)


class ActorReviewResponse(BaseModel):
    actor_type: OwnerType
    actor_id: uuid.UUID
    status: AccountStatus
    compliance_status: str


class ReviewLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    actor_type: OwnerType
    actor_id: uuid.UUID
    reviewer_id: uuid.UUID | None = None
    action: ReviewAction
    from_status: str
    to_status: str
    notes: str | None = None
    created_at: datetime


class RequirementResponse(BaseModel):
    doc_type: str
    alternatives: list[str] = Field(default_factory=list)
    condition: str | None = None
