from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.attestations.models import Attestation, AttestationRole, AttestationStance
from src.config import settings
from src.ballots.models import BallotVersion
from src.elections.models import ElectionConfig
from src.resolution.models import AttestationCase
from src.shared.models import utcnow
from src.tables.models import ElectoralTable

JURY = AttestationRole.JURY
OBSERVER = AttestationRole.OBSERVER

ADMIN_HEADERS = {"X-API-Key": settings.ADMIN_API_KEY}


async def create_config(
    db: AsyncSession,
    voting_ended: bool = True,
    allow_override: bool = False,
    now: Optional[datetime] = None,
    name: str = "Test election",
) -> ElectionConfig:
    now = now or utcnow()
    if voting_ended:
        start, end = now - timedelta(hours=10), now - timedelta(hours=1)
    else:
        start, end = now - timedelta(hours=1), now + timedelta(hours=5)
    config = ElectionConfig(
        name=name,
        voting_start=start,
        voting_end=end,
        results_start=end + timedelta(minutes=30),
        allow_override=allow_override,
        is_active=True,
        timezone="America/La_Paz",
    )
    db.add(config)
    await db.commit()
    return config


async def create_table(
    db: AsyncSession,
    table_code: str,
    versions: int = 2,
    department: str = "La Paz",
    municipality: str = "El Alto",
) -> List[BallotVersion]:
    db.add(ElectoralTable(
        table_code=table_code,
        table_number=table_code[-2:],
        department=department,
        province="Murillo",
        municipality=municipality,
        electoral_location="Colegio Central",
    ))
    created = [BallotVersion(table_code=table_code, version=n) for n in range(1, versions + 1)]
    db.add_all(created)
    await db.commit()
    return created


async def attest(
    db: AsyncSession,
    version: BallotVersion,
    supporters: Sequence[Tuple[str, AttestationRole]],
    stance: AttestationStance = AttestationStance.SUPPORT,
):
    for submitter_id, role in supporters:
        db.add(Attestation(version_id=version.id, submitter_id=submitter_id, role=role, stance=stance))
    await db.commit()


def observers(prefix: str, count: int) -> List[Tuple[str, AttestationRole]]:
    return [(f"{prefix}-obs-{i}", OBSERVER) for i in range(count)]


def juries(prefix: str, count: int) -> List[Tuple[str, AttestationRole]]:
    return [(f"{prefix}-jury-{i}", JURY) for i in range(count)]


async def get_case(session_factory, table_code: str) -> Optional[AttestationCase]:
    async with session_factory() as db:
        result = await db.execute(select(AttestationCase).where(AttestationCase.table_code == table_code))
        return result.scalars().first()


async def counted_versions(session_factory, table_code: str) -> List[BallotVersion]:
    async with session_factory() as db:
        result = await db.execute(
            select(BallotVersion).where(
                BallotVersion.table_code == table_code,
                BallotVersion.counts_toward_totals.is_(True),
            )
        )
        return list(result.scalars().all())


async def get_table(session_factory, table_code: str) -> ElectoralTable:
    async with session_factory() as db:
        result = await db.execute(select(ElectoralTable).where(ElectoralTable.table_code == table_code))
        return result.scalars().one()
