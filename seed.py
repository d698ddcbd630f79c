import asyncio
from datetime import timedelta
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy import update
from src.database import Base
from src.config import settings
from src.shared.models import utcnow
from src.elections.models import ElectionConfig
from src.tables.models import ElectoralTable
from src.ballots.models import BallotVersion
from src.attestations.models import Attestation, AttestationRole, AttestationStance
from src.resolution.models import AttestationCase

engine = create_async_engine(settings.SQLALCHEMY_DATABASE_URI, echo=True)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)

JURY = AttestationRole.JURY
OBSERVER = AttestationRole.OBSERVER

# table_code -> list of versions, each a list of (submitter, role) supporters
DEMO_TABLES = {
    "10101001001": [[("jury-1001", JURY)]],
    "10101001002": [[("obs-2001", OBSERVER), ("obs-2002", OBSERVER)]],
    "10101001003": [
        [("obs-3001", OBSERVER), ("obs-3002", OBSERVER), ("obs-3003", OBSERVER), ("obs-3004", OBSERVER), ("obs-3005", OBSERVER)],
        [("jury-3001", JURY)],
    ],
    "10101001004": [
        [("obs-4001", OBSERVER), ("obs-4002", OBSERVER), ("obs-4003", OBSERVER), ("jury-4001", JURY)],
        [("obs-4004", OBSERVER)],
    ],
}

async def seed_data():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        now = utcnow()
        await session.execute(update(ElectionConfig).values(is_active=False))
        session.add(ElectionConfig(
            name=f"Demo election {now:%Y%m%d%H%M%S}",
            voting_start=now - timedelta(hours=10),
            voting_end=now - timedelta(hours=1),
            results_start=now,
            allow_override=False,
            is_active=True,
            timezone=settings.ELECTION_TIMEZONE,
        ))

        for number, (table_code, versions) in enumerate(DEMO_TABLES.items(), start=1):
            session.add(ElectoralTable(
                table_code=table_code,
                table_number=str(number),
                department="La Paz",
                province="Murillo",
                municipality="Nuestra Señora de La Paz",
                electoral_location="Unidad Educativa Demo",
            ))
            for version_number, supporters in enumerate(versions, start=1):
                version = BallotVersion(table_code=table_code, version=version_number)
                session.add(version)
                await session.flush()
                for submitter_id, role in supporters:
                    session.add(Attestation(
                        version_id=version.id,
                        submitter_id=submitter_id,
                        role=role,
                        stance=AttestationStance.SUPPORT,
                    ))

        await session.commit()
        print(f"Seeded {len(DEMO_TABLES)} tables. Run `python -m src.scripts.resolve_once` to resolve them.")

    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(seed_data())
