from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class BallotVersionResponse(BaseModel):
    id: UUID
    table_code: str
    version: int
    counts_toward_totals: bool
    ipfs_cid: Optional[str] = None
    record_id: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
