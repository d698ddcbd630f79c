from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.resolution.models import CaseStatus


class CaseResponse(BaseModel):
    table_code: str
    status: CaseStatus
    winning_version_id: Optional[UUID] = None
    resolved_at: Optional[datetime] = None
    rationale: Optional[str] = None
    summary: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(from_attributes=True)


class CasePage(BaseModel):
    data: List[CaseResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class ResolutionRunResponse(BaseModel):
    skipped: bool
    reason: Optional[str] = None
    processed: int = 0
    failed: int = 0
    statuses: Dict[str, int] = {}
