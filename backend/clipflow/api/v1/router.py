from __future__ import annotations

from fastapi import APIRouter

from .endpoints import health, notes, tags, workspace

WORKSPACE_PREFIX = "/workspaces/{workspace_id}"

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(tags.router, prefix=f"{WORKSPACE_PREFIX}/tags", tags=["tags"])
api_router.include_router(tags.taxonomy_router, prefix=WORKSPACE_PREFIX, tags=["tags"])
api_router.include_router(notes.router, prefix=f"{WORKSPACE_PREFIX}/notes", tags=["notes"])
api_router.include_router(workspace.router, prefix=WORKSPACE_PREFIX, tags=["workspace"])
