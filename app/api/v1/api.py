"""
V1 API router aggregation.

The top-level ``main.py`` mounts this router at ``settings.API_V1_STR``.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import funds

api_router = APIRouter()

api_router.include_router(funds.router, prefix="/funds", tags=["Funds"])
