from fastapi import APIRouter

from gazette_ingest.api.v1.endpoints import gazettes, health

api_router = APIRouter()

api_router.include_router(gazettes.router, prefix="/gazettes", tags=["Gazettes"])
api_router.include_router(health.router, prefix="/health", tags=["Health"])

__all__ = ["api_router"]
