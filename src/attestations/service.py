import logging
import math
from typing import Any, List, Optional, Tuple
from uuid import UUID

from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy import select, desc, func, case, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.attestations.models import DEDUP_CONSTRAINT, Attestation, AttestationRole, AttestationStance
from src.attestations.schemas import (
    AttestationCreate,
    AttestationFailure,
    AttestationPage,
    AttestationResponse,
    AttestationStats,
    BulkAttestationResponse,
    BulkSummary,
    FailureReason,
    MostSupportedVersion,
)
from src.ballots.models import BallotVersion
from src.ballots.service import BallotVersionService

logger = logging.getLogger(__name__)


def _describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "item"
    return f"{location}: {first.get('msg', 'invalid value')}"


def _classify_integrity_error(exc: IntegrityError) -> Tuple[FailureReason, str]:
    """Tell the dedup constraint apart from a version that vanished before the insert."""
    message = str(exc.orig)
    if DEDUP_CONSTRAINT in message or "unique" in message.lower():
        return FailureReason.DUPLICATE_ATTESTATION, "Submitter already attested this version"
    return FailureReason.VERSION_NOT_FOUND, "Referenced ballot version does not exist"


class AttestationService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.versions = BallotVersionService(db)

    async def create_bulk(self, items: List[Any]) -> BulkAttestationResponse:
        """Insert each item on its own; failures are reported per item and
        never abort the rest of the batch."""
        created: List[AttestationResponse] = []
        errors: List[AttestationFailure] = []

        for index, raw in enumerate(items):
            try:
                item = AttestationCreate.model_validate(raw)
            except ValidationError as e:
                errors.append(AttestationFailure(
                    index=index,
                    reason=FailureReason.INVALID_ITEM,
                    error=_describe_validation_error(e),
                    data=raw,
                ))
                continue

            if not await self.versions.exists(item.version_id):
                errors.append(AttestationFailure(
                    index=index,
                    reason=FailureReason.VERSION_NOT_FOUND,
                    error="Referenced ballot version does not exist",
                    data=raw,
                ))
                continue

            attestation = Attestation(**item.model_dump())
            self.db.add(attestation)
            try:
                await self.db.commit()
            except IntegrityError as e:
                await self.db.rollback()
                reason, message = _classify_integrity_error(e)
                errors.append(AttestationFailure(index=index, reason=reason, error=message, data=raw))
                continue

            await self.db.refresh(attestation)
            created.append(AttestationResponse.model_validate(attestation))

        if errors:
            logger.info("Bulk attestation: %d created, %d rejected", len(created), len(errors))

        return BulkAttestationResponse(
            created=created,
            errors=errors,
            summary=BulkSummary(total=len(items), successful=len(created), failed=len(errors)),
        )

    async def list_attestations(
        self,
        page: int = 1,
        limit: int = 10,
        version_id: Optional[UUID] = None,
        role: Optional[AttestationRole] = None,
        stance: Optional[AttestationStance] = None,
        submitter_id: Optional[str] = None,
    ) -> AttestationPage:
        filters = []
        if version_id:
            filters.append(Attestation.version_id == version_id)
        if submitter_id:
            filters.append(Attestation.submitter_id == submitter_id)
        if role:
            filters.append(Attestation.role == role)
        if stance:
            filters.append(Attestation.stance == stance)

        total = await self.db.scalar(select(func.count(Attestation.id)).where(*filters))
        result = await self.db.execute(
            select(Attestation)
            .where(*filters)
            .order_by(desc(Attestation.created_at))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return AttestationPage(
            data=[AttestationResponse.model_validate(a) for a in result.scalars().all()],
            total=total or 0,
            page=page,
            limit=limit,
            total_pages=math.ceil((total or 0) / limit),
        )

    async def list_by_version(self, version_id: UUID) -> List[Attestation]:
        result = await self.db.execute(
            select(Attestation)
            .where(Attestation.version_id == version_id)
            .order_by(desc(Attestation.created_at))
        )
        return list(result.scalars().all())

    async def version_stats(self, version_id: UUID) -> AttestationStats:
        await self.versions.get_version(version_id)
        result = await self.db.execute(
            select(Attestation.stance, func.count(Attestation.id))
            .where(Attestation.version_id == version_id)
            .group_by(Attestation.stance)
        )
        counts = {stance: count for stance, count in result.all()}
        support = counts.get(AttestationStance.SUPPORT, 0)
        reject = counts.get(AttestationStance.REJECT, 0)
        total = support + reject
        return AttestationStats(
            version_id=version_id,
            total_attestations=total,
            support_count=support,
            reject_count=reject,
            support_percentage=round(support * 100 / total, 2) if total else 0.0,
        )

    async def most_supported_version(self, table_code: str) -> MostSupportedVersion:
        support_count = func.coalesce(
            func.sum(case((Attestation.stance == AttestationStance.SUPPORT, 1), else_=0)), 0
        )
        result = await self.db.execute(
            select(
                BallotVersion.id,
                BallotVersion.version,
                support_count.label("support_count"),
                func.count(Attestation.id).label("total_attestations"),
            )
            .outerjoin(Attestation, Attestation.version_id == BallotVersion.id)
            .where(BallotVersion.table_code == table_code)
            .group_by(BallotVersion.id, BallotVersion.version)
            .order_by(desc("support_count"), desc(BallotVersion.version))
            .limit(1)
        )
        row = result.first()
        if row is None:
            raise HTTPException(status_code=404, detail="No ballot versions for this table code")
        return MostSupportedVersion(
            version_id=row.id,
            version=row.version,
            support_count=row.support_count,
            total_attestations=row.total_attestations,
        )

    async def remove(self, attestation_id: UUID) -> None:
        result = await self.db.execute(
            delete(Attestation).where(Attestation.id == attestation_id)
        )
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Attestation not found")
        await self.db.commit()
        logger.warning("Attestation %s removed by administrator", attestation_id)
