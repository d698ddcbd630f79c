import asyncio
from src.database import engine, Base

# Import all models to ensure they are registered in Base.metadata
from src.elections.models import ElectionConfig
from src.tables.models import ElectoralTable
from src.ballots.models import BallotVersion
from src.attestations.models import Attestation
from src.resolution.models import AttestationCase

async def init_models():
    async with engine.begin() as conn:
        # await conn.run_sync(Base.metadata.drop_all) # Optional: Reset DB
        await conn.run_sync(Base.metadata.create_all)
    print("Database tables created.")

if __name__ == "__main__":
    asyncio.run(init_models())
