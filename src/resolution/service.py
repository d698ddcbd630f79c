import logging
import math
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import select, desc, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.attestations.models import Attestation, AttestationRole, AttestationStance
from src.ballots.models import BallotVersion
from src.ballots.service import BallotVersionService
from src.resolution.decision import Tally, Verdict, decide, tally_support
from src.resolution.models import AttestationCase, CaseStatus, TERMINAL_STATUSES
from src.resolution.schemas import CasePage, CaseResponse
from src.tables.models import ElectoralTable

logger = logging.getLogger(__name__)


class ResolutionService:
    """Reads a table's attestations, applies the consensus rules and commits
    the verdict together with its side effects."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.versions = BallotVersionService(db)

    async def pending_table_codes(self) -> List[str]:
        """Tables with at least one supporting attestation and no terminal case."""
        terminal = select(AttestationCase.table_code).where(
            AttestationCase.status.in_(TERMINAL_STATUSES)
        )
        result = await self.db.execute(
            select(BallotVersion.table_code)
            .join(Attestation, Attestation.version_id == BallotVersion.id)
            .where(
                Attestation.stance == AttestationStance.SUPPORT,
                BallotVersion.table_code.not_in(terminal),
            )
            .distinct()
            .order_by(BallotVersion.table_code)
        )
        return list(result.scalars().all())

    async def load_tallies(self, table_code: str) -> Dict[UUID, Tally]:
        versions = await self.versions.list_by_table(table_code)
        result = await self.db.execute(
            select(Attestation.version_id, Attestation.role)
            .join(BallotVersion, Attestation.version_id == BallotVersion.id)
            .where(
                BallotVersion.table_code == table_code,
                Attestation.stance == AttestationStance.SUPPORT,
            )
        )
        tallies: Dict[UUID, Tally] = {v.id: Tally() for v in versions}
        tallies.update(tally_support(
            (version_id, role == AttestationRole.JURY) for version_id, role in result.all()
        ))
        return tallies

    async def _get_case(self, table_code: str) -> Optional[AttestationCase]:
        result = await self.db.execute(
            select(AttestationCase).where(AttestationCase.table_code == table_code)
        )
        return result.scalars().first()

    async def resolve_table(self, table_code: str, now: datetime) -> Optional[Verdict]:
        """Evaluate and commit one table. Returns None when the case is already terminal."""
        case = await self._get_case(table_code)
        if case is not None and case.status in TERMINAL_STATUSES:
            return None

        tallies = await self.load_tallies(table_code)
        verdict = decide(tallies)

        try:
            await self._apply_verdict(table_code, case, verdict, tallies, now)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.debug("Table %s resolved as %s (%s)", table_code, verdict.status.value, verdict.rationale)
        return verdict

    async def _apply_verdict(
        self,
        table_code: str,
        case: Optional[AttestationCase],
        verdict: Verdict,
        tallies: Dict[UUID, Tally],
        now: datetime,
    ):
        summary = {
            "per_version": {
                str(vid): {"users": t.users, "juries": t.juries} for vid, t in tallies.items()
            },
        }
        if case is None:
            case = AttestationCase(table_code=table_code)
            self.db.add(case)
        case.status = verdict.status
        case.winning_version_id = verdict.winner
        case.rationale = verdict.rationale
        case.resolved_at = now
        case.summary = summary

        await self.versions.mark_winner(table_code, verdict.winner)
        await self.db.execute(
            update(ElectoralTable)
            .where(ElectoralTable.table_code == table_code)
            .values(observed=verdict.status == CaseStatus.UNRESOLVED)
        )

    async def get_case(self, table_code: str) -> AttestationCase:
        case = await self._get_case(table_code)
        if not case:
            raise HTTPException(status_code=404, detail="No case for this table code")
        return case

    async def list_cases(
        self,
        page: int = 1,
        limit: int = 20,
        status: Optional[CaseStatus] = None,
        department: Optional[str] = None,
        province: Optional[str] = None,
        municipality: Optional[str] = None,
        electoral_location: Optional[str] = None,
    ) -> CasePage:
        filters = []
        if status:
            filters.append(AttestationCase.status == status)
        location_filters = {
            ElectoralTable.department: department,
            ElectoralTable.province: province,
            ElectoralTable.municipality: municipality,
            ElectoralTable.electoral_location: electoral_location,
        }
        filters.extend(column == value for column, value in location_filters.items() if value)

        base = (
            select(AttestationCase)
            .outerjoin(ElectoralTable, ElectoralTable.table_code == AttestationCase.table_code)
            .where(*filters)
        )
        total = await self.db.scalar(select(func.count()).select_from(base.subquery()))
        result = await self.db.execute(
            base.order_by(desc(AttestationCase.resolved_at), AttestationCase.table_code)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        total = total or 0
        return CasePage(
            data=[CaseResponse.model_validate(c) for c in result.scalars().all()],
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        )
