"""
Health check route.
"""
from fastapi import APIRouter, Depends

from shortpaste.database import PasteStore
from shortpaste.dependencies import get_store
from shortpaste.models import HealthCheck

router = APIRouter()


@router.get("/api/healthz", response_model=HealthCheck)
async def health_check(store: PasteStore = Depends(get_store)) -> HealthCheck:
    """
    Health check endpoint.
    Returns 200 with ok=true if application and database are healthy.
    """
    return HealthCheck(ok=store.is_healthy(), backend=store.backend_name)
