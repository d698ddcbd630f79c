import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.security import require_admin_key
from src.database import get_db
from src.resolution.job import ResolverJob, get_resolver_job
from src.resolution.models import CaseStatus
from src.resolution.schemas import CasePage, CaseResponse, ResolutionRunResponse
from src.resolution.service import ResolutionService

router = APIRouter(prefix="/cases", tags=["cases"])


@router.get("", response_model=CasePage)
async def list_cases(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    status: Optional[CaseStatus] = None,
    department: Optional[str] = None,
    province: Optional[str] = None,
    municipality: Optional[str] = None,
    electoral_location: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    service = ResolutionService(db)
    return await service.list_cases(
        page, limit, status, department, province, municipality, electoral_location
    )


@router.post(
    "/resolve",
    response_model=ResolutionRunResponse,
    dependencies=[Depends(require_admin_key)],
)
async def run_resolution(job: ResolverJob = Depends(get_resolver_job)):
    """Run one resolution pass now. Safe to repeat: unchanged inputs give unchanged cases."""
    try:
        report = await job.run_once()
    except (asyncio.TimeoutError, SQLAlchemyError):
        raise HTTPException(status_code=503, detail="Resolution pass failed; it will be retried on the next cycle")
    return ResolutionRunResponse(
        skipped=report.skipped,
        reason=report.reason,
        processed=report.processed,
        failed=report.failed,
        statuses=report.statuses,
    )


@router.get("/{table_code}", response_model=CaseResponse)
async def get_case(table_code: str, db: AsyncSession = Depends(get_db)):
    service = ResolutionService(db)
    return await service.get_case(table_code)
