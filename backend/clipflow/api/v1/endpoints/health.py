from __future__ import annotations

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from clipflow.config import settings

router = APIRouter()


@router.get("/")
async def health_check():
    """Health check endpoint."""
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "healthy",
            "service": "clipflow-api",
            "version": "0.1.0"
        }
    )


@router.get("/ready")
async def readiness_check(request: Request):
    """Readiness check endpoint."""
    registry = request.app.state.workspaces
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "ready",
            "storage_backend": settings.storage_backend,
            "open_workspaces": len(registry),
            "api_prefix": settings.api_prefix
        }
    )
