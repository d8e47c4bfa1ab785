"""
Health API Routes
"""
from fastapi import APIRouter
from fastapi import status
from fastapi.responses import JSONResponse

from synapse_bpm.database import database_health
from synapse_bpm.websockets.connection_manager import manager

router = APIRouter()


@router.get("/health")
async def health_check() -> JSONResponse:
    """Application and database health"""
    db = database_health()
    ok = bool(db.get("ok"))
    return JSONResponse(
        status_code=status.HTTP_200_OK if ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if ok else "degraded",
            "database": db,
            "websocket_connections": len(manager.sessions),
        },
    )
