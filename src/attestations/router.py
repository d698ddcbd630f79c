from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.attestations.models import AttestationRole, AttestationStance
from src.attestations.schemas import (
    AttestationBulkCreate,
    AttestationPage,
    AttestationResponse,
    AttestationStats,
    BulkAttestationResponse,
    MostSupportedVersion,
)
from src.attestations.service import AttestationService
from src.core.security import require_admin_key
from src.database import get_db
from src.elections.dependencies import require_voting_window

router = APIRouter(prefix="/attestations", tags=["attestations"])


@router.post(
    "",
    response_model=BulkAttestationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_voting_window)],
)
async def create_attestations(
    body: AttestationBulkCreate,
    db: AsyncSession = Depends(get_db),
):
    service = AttestationService(db)
    return await service.create_bulk(body.attestations)


@router.get("", response_model=AttestationPage)
async def list_attestations(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    version_id: Optional[UUID] = None,
    role: Optional[AttestationRole] = None,
    stance: Optional[AttestationStance] = None,
    db: AsyncSession = Depends(get_db),
):
    service = AttestationService(db)
    return await service.list_attestations(page, limit, version_id, role, stance)


@router.get("/submitter/{submitter_id}", response_model=AttestationPage)
async def list_submitter_attestations(
    submitter_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    role: Optional[AttestationRole] = None,
    stance: Optional[AttestationStance] = None,
    db: AsyncSession = Depends(get_db),
):
    service = AttestationService(db)
    return await service.list_attestations(page, limit, role=role, stance=stance, submitter_id=submitter_id)


@router.get("/version/{version_id}", response_model=List[AttestationResponse])
async def list_version_attestations(version_id: UUID, db: AsyncSession = Depends(get_db)):
    service = AttestationService(db)
    return await service.list_by_version(version_id)


@router.get("/version/{version_id}/stats", response_model=AttestationStats)
async def get_version_stats(version_id: UUID, db: AsyncSession = Depends(get_db)):
    service = AttestationService(db)
    return await service.version_stats(version_id)


@router.get("/most-supported/{table_code}", response_model=MostSupportedVersion)
async def get_most_supported(table_code: str, db: AsyncSession = Depends(get_db)):
    service = AttestationService(db)
    return await service.most_supported_version(table_code)


@router.delete(
    "/{attestation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin_key)],
)
async def remove_attestation(attestation_id: UUID, db: AsyncSession = Depends(get_db)):
    service = AttestationService(db)
    await service.remove(attestation_id)
