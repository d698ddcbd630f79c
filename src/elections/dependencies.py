from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db
from src.elections.service import ElectionConfigService, WindowState


async def get_window_state(db: AsyncSession = Depends(get_db)) -> WindowState:
    return await ElectionConfigService(db).get_window_state()


async def require_active_config(
    state: WindowState = Depends(get_window_state),
) -> WindowState:
    if not state.has_active_config:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No active election configuration",
        )
    return state


async def require_voting_window(
    state: WindowState = Depends(require_active_config),
) -> WindowState:
    """Mutation endpoints stay open during voting or while the override is set."""
    if not state.in_voting_window:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Outside voting hours",
        )
    return state


async def require_results_window(
    state: WindowState = Depends(require_active_config),
) -> WindowState:
    if not state.in_results_window:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Results are not available yet",
        )
    return state
