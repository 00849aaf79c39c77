"""
Health check API route
"""

from datetime import datetime, timezone
from fastapi import APIRouter, HTTPException, Request
from database.connection import ping_database

router = APIRouter()


@router.get("/")
async def health_check(request: Request):
    """Report service health and whether the users store answers"""
    if not await ping_database():
        raise HTTPException(status_code=503, detail="Health check failed: database unavailable")

    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "connected",
        "backend": request.app.state.settings.storage_backend
    }
