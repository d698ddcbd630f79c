from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.ballots.schemas import BallotVersionResponse
from src.ballots.service import BallotVersionService
from src.database import get_db
from src.elections.dependencies import require_results_window

router = APIRouter(prefix="/ballots", tags=["ballots"])


@router.get(
    "/counted",
    response_model=List[BallotVersionResponse],
    dependencies=[Depends(require_results_window)],
)
async def list_counted_versions(
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_db),
):
    service = BallotVersionService(db)
    return await service.list_counted(skip, limit)


@router.get("/table/{table_code}", response_model=List[BallotVersionResponse])
async def list_table_versions(table_code: str, db: AsyncSession = Depends(get_db)):
    service = BallotVersionService(db)
    return await service.list_by_table(table_code)


@router.get("/{version_id}", response_model=BallotVersionResponse)
async def get_version(version_id: UUID, db: AsyncSession = Depends(get_db)):
    service = BallotVersionService(db)
    return await service.get_version(version_id)
