from typing import List, Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.ballots.models import BallotVersion


class BallotVersionService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_version(self, version_id: UUID) -> BallotVersion:
        version = await self.db.get(BallotVersion, version_id)
        if not version:
            raise HTTPException(status_code=404, detail="Ballot version not found")
        return version

    async def exists(self, version_id: UUID) -> bool:
        result = await self.db.execute(
            select(BallotVersion.id).where(BallotVersion.id == version_id)
        )
        return result.first() is not None

    async def list_by_table(self, table_code: str) -> List[BallotVersion]:
        result = await self.db.execute(
            select(BallotVersion)
            .where(BallotVersion.table_code == table_code)
            .order_by(BallotVersion.version)
        )
        return list(result.scalars().all())

    async def list_counted(self, skip: int = 0, limit: int = 100) -> List[BallotVersion]:
        result = await self.db.execute(
            select(BallotVersion)
            .where(BallotVersion.counts_toward_totals.is_(True))
            .order_by(BallotVersion.table_code)
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def mark_winner(self, table_code: str, winner_id: Optional[UUID] = None):
        """Clear the counting flag across the table, then set it on the winner.

        Does not commit; callers apply it inside their own transaction.
        """
        await self.db.execute(
            update(BallotVersion)
            .where(BallotVersion.table_code == table_code)
            .values(counts_toward_totals=False)
        )
        if winner_id is not None:
            await self.db.execute(
                update(BallotVersion)
                .where(BallotVersion.id == winner_id, BallotVersion.table_code == table_code)
                .values(counts_toward_totals=True)
            )
