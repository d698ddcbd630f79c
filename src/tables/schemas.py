from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ElectoralTableResponse(BaseModel):
    id: UUID
    table_code: str
    table_number: str
    department: Optional[str] = None
    province: Optional[str] = None
    municipality: Optional[str] = None
    electoral_location: Optional[str] = None
    observed: bool
    active: bool
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
