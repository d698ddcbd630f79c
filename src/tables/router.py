from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db
from src.tables.models import ElectoralTable
from src.tables.schemas import ElectoralTableResponse

router = APIRouter(prefix="/tables", tags=["tables"])


@router.get("/{table_code}", response_model=ElectoralTableResponse)
async def get_table(table_code: str, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(ElectoralTable).where(ElectoralTable.table_code == table_code)
    )
    table = result.scalars().first()
    if not table:
        raise HTTPException(status_code=404, detail="Electoral table not found")
    return table
