from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.security import require_admin_key
from src.database import get_db
from src.elections.schemas import (
    ElectionConfigCreate,
    ElectionConfigResponse,
    ElectionConfigUpdate,
    ElectionStatusResponse,
    OverrideUpdate,
)
from src.elections.service import ElectionConfigService, WindowState
from src.elections.timezone import utc_to_local
from src.shared.models import utcnow

router = APIRouter(prefix="/elections", tags=["elections"])


@router.post(
    "/configs",
    response_model=ElectionConfigResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin_key)],
)
async def create_config(
    config: ElectionConfigCreate,
    db: AsyncSession = Depends(get_db),
):
    service = ElectionConfigService(db)
    return await service.create_config(config)


@router.get("/configs", response_model=List[ElectionConfigResponse])
async def list_configs(db: AsyncSession = Depends(get_db)):
    service = ElectionConfigService(db)
    return await service.list_configs()


@router.get("/configs/active", response_model=ElectionConfigResponse)
async def get_active_config(db: AsyncSession = Depends(get_db)):
    service = ElectionConfigService(db)
    config = await service.get_active_config()
    if not config:
        raise HTTPException(status_code=404, detail="No active election configuration")
    return config


@router.get("/configs/{config_id}", response_model=ElectionConfigResponse)
async def get_config(config_id: UUID, db: AsyncSession = Depends(get_db)):
    service = ElectionConfigService(db)
    return await service.get_config(config_id)


@router.patch(
    "/configs/{config_id}",
    response_model=ElectionConfigResponse,
    dependencies=[Depends(require_admin_key)],
)
async def update_config(
    config_id: UUID,
    config: ElectionConfigUpdate,
    db: AsyncSession = Depends(get_db),
):
    service = ElectionConfigService(db)
    return await service.update_config(config_id, config)


@router.put(
    "/override",
    response_model=ElectionConfigResponse,
    dependencies=[Depends(require_admin_key)],
)
async def set_override(
    body: OverrideUpdate,
    db: AsyncSession = Depends(get_db),
):
    service = ElectionConfigService(db)
    return await service.set_override(body.allow_override)


@router.get("/status", response_model=ElectionStatusResponse)
async def get_status(db: AsyncSession = Depends(get_db)):
    service = ElectionConfigService(db)
    config = await service.get_active_config()
    state = WindowState.evaluate(config, utcnow())
    return ElectionStatusResponse(
        has_active_config=state.has_active_config,
        in_voting_period=state.in_voting_period,
        in_voting_window=state.in_voting_window,
        voting_closed=state.voting_closed,
        in_results_window=state.in_results_window,
        now=state.now,
        now_local=utc_to_local(state.now),
        config=ElectionConfigResponse.model_validate(config) if config else None,
    )
