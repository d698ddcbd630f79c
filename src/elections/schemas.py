from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, computed_field, field_validator

from src.elections.timezone import to_utc, utc_to_local


class ElectionConfigBase(BaseModel):
    name: str
    voting_start: datetime
    voting_end: datetime
    results_start: datetime
    allow_override: bool = False


class ElectionConfigCreate(ElectionConfigBase):
    @field_validator("voting_start", "voting_end", "results_start")
    @classmethod
    def normalize_to_utc(cls, value: datetime) -> datetime:
        return to_utc(value)


class ElectionConfigUpdate(BaseModel):
    name: Optional[str] = None
    voting_start: Optional[datetime] = None
    voting_end: Optional[datetime] = None
    results_start: Optional[datetime] = None
    allow_override: Optional[bool] = None
    is_active: Optional[bool] = None

    @field_validator("voting_start", "voting_end", "results_start")
    @classmethod
    def normalize_to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_utc(value) if value is not None else None


class OverrideUpdate(BaseModel):
    allow_override: bool


class ElectionConfigResponse(ElectionConfigBase):
    id: UUID
    is_active: bool
    timezone: str
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def voting_start_local(self) -> str:
        return utc_to_local(self.voting_start, self.timezone)

    @computed_field
    @property
    def voting_end_local(self) -> str:
        return utc_to_local(self.voting_end, self.timezone)

    @computed_field
    @property
    def results_start_local(self) -> str:
        return utc_to_local(self.results_start, self.timezone)

    model_config = ConfigDict(from_attributes=True)


class ElectionStatusResponse(BaseModel):
    has_active_config: bool
    in_voting_period: bool
    in_voting_window: bool
    voting_closed: bool
    in_results_window: bool
    now: datetime
    now_local: str
    config: Optional[ElectionConfigResponse] = None
