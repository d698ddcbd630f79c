from fastapi import APIRouter

from src.elections.router import router as elections_router
from src.ballots.router import router as ballots_router
from src.attestations.router import router as attestations_router
from src.resolution.router import router as cases_router
from src.tables.router import router as tables_router

api_router = APIRouter()

api_router.include_router(elections_router)
api_router.include_router(ballots_router)
api_router.include_router(attestations_router)
api_router.include_router(cases_router)
api_router.include_router(tables_router)
