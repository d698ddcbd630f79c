from datetime import datetime
from enum import Enum
from typing import Any, List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.attestations.models import AttestationRole, AttestationStance


class AttestationCreate(BaseModel):
    version_id: UUID
    submitter_id: str = Field(min_length=1)
    role: AttestationRole
    stance: AttestationStance

    @field_validator("role", "stance", mode="before")
    @classmethod
    def normalize_case(cls, value: Any) -> Any:
        # Clients send either "jury" or "JURY".
        return value.upper() if isinstance(value, str) else value


class AttestationBulkCreate(BaseModel):
    # Items are validated one by one in the service so a malformed entry
    # fails alone instead of rejecting the whole request.
    attestations: List[Any]


class AttestationResponse(BaseModel):
    id: UUID
    version_id: UUID
    submitter_id: str
    role: AttestationRole
    stance: AttestationStance
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FailureReason(str, Enum):
    INVALID_ITEM = "INVALID_ITEM"
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"
    DUPLICATE_ATTESTATION = "DUPLICATE_ATTESTATION"


class AttestationFailure(BaseModel):
    index: int
    reason: FailureReason
    error: str
    data: Any = None


class BulkSummary(BaseModel):
    total: int
    successful: int
    failed: int


class BulkAttestationResponse(BaseModel):
    created: List[AttestationResponse]
    errors: List[AttestationFailure]
    summary: BulkSummary


class AttestationPage(BaseModel):
    data: List[AttestationResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class AttestationStats(BaseModel):
    version_id: UUID
    total_attestations: int
    support_count: int
    reject_count: int
    support_percentage: float


class MostSupportedVersion(BaseModel):
    version_id: UUID
    version: int
    support_count: int
    total_attestations: int
