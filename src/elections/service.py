import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select, desc, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.elections.models import ElectionConfig
from src.elections.schemas import ElectionConfigCreate, ElectionConfigUpdate
from src.shared.models import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WindowState:
    """Snapshot of the election schedule at a single instant (naive UTC).

    ``in_voting_window`` honours the administrative override and gates
    mutation endpoints. ``voting_closed`` depends only on the end timestamp
    and gates resolution.
    """
    now: datetime
    has_active_config: bool = False
    in_voting_period: bool = False
    in_voting_window: bool = False
    voting_closed: bool = False
    in_results_window: bool = False
    config_id: Optional[UUID] = None

    @property
    def resolution_permitted(self) -> bool:
        return self.has_active_config and self.voting_closed

    @classmethod
    def evaluate(cls, config: Optional[ElectionConfig], now: datetime) -> "WindowState":
        if config is None:
            return cls(now=now)

        in_voting_period = config.voting_start <= now <= config.voting_end
        return cls(
            now=now,
            has_active_config=True,
            in_voting_period=in_voting_period,
            in_voting_window=in_voting_period or bool(config.allow_override),
            voting_closed=now > config.voting_end,
            in_results_window=now >= config.results_start,
            config_id=config.id,
        )


class ElectionConfigService:
    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _validate_dates(voting_start: datetime, voting_end: datetime, results_start: datetime):
        if voting_start >= voting_end:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Voting start must be before voting end",
            )
        if results_start < voting_end:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Results start must not be before voting end",
            )

    async def _deactivate_all(self):
        await self.db.execute(
            update(ElectionConfig)
            .where(ElectionConfig.is_active.is_(True))
            .values(is_active=False)
        )

    async def create_config(self, config_in: ElectionConfigCreate) -> ElectionConfig:
        self._validate_dates(config_in.voting_start, config_in.voting_end, config_in.results_start)

        # Previous configurations stay in the table as history.
        await self._deactivate_all()
        config = ElectionConfig(
            **config_in.model_dump(),
            timezone=settings.ELECTION_TIMEZONE,
            is_active=True,
        )
        self.db.add(config)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A configuration with that name already exists",
            )
        await self.db.refresh(config)
        logger.info("Election config %s activated (voting ends %s UTC)", config.name, config.voting_end)
        return config

    async def get_active_config(self) -> Optional[ElectionConfig]:
        result = await self.db.execute(
            select(ElectionConfig)
            .where(ElectionConfig.is_active.is_(True))
            .order_by(desc(ElectionConfig.created_at))
        )
        return result.scalars().first()

    async def list_configs(self) -> List[ElectionConfig]:
        result = await self.db.execute(
            select(ElectionConfig).order_by(desc(ElectionConfig.created_at))
        )
        return list(result.scalars().all())

    async def get_config(self, config_id: UUID) -> ElectionConfig:
        config = await self.db.get(ElectionConfig, config_id)
        if not config:
            raise HTTPException(status_code=404, detail="Election configuration not found")
        return config

    async def update_config(self, config_id: UUID, config_in: ElectionConfigUpdate) -> ElectionConfig:
        config = await self.get_config(config_id)
        update_data = config_in.model_dump(exclude_unset=True)

        if {"voting_start", "voting_end", "results_start"} & update_data.keys():
            self._validate_dates(
                update_data.get("voting_start") or config.voting_start,
                update_data.get("voting_end") or config.voting_end,
                update_data.get("results_start") or config.results_start,
            )

        if update_data.get("is_active") is True:
            await self._deactivate_all()

        for field, value in update_data.items():
            if value is not None:
                setattr(config, field, value)

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A configuration with that name already exists",
            )
        await self.db.refresh(config)
        return config

    async def set_override(self, allow_override: bool) -> ElectionConfig:
        config = await self.get_active_config()
        if not config:
            raise HTTPException(status_code=404, detail="No active election configuration")
        config.allow_override = allow_override
        await self.db.commit()
        await self.db.refresh(config)
        logger.warning("Mutation override on config %s set to %s", config.name, allow_override)
        return config

    async def get_window_state(self, now: Optional[datetime] = None) -> WindowState:
        config = await self.get_active_config()
        return WindowState.evaluate(config, now or utcnow())
