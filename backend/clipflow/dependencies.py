from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator  # noqa: TCH003
from typing import TYPE_CHECKING

from fastapi import Depends, HTTPException, Path, Request, status

from clipflow.config import settings
from clipflow.core.repositories.implementations.file.blob_store import FileBlobStore
from clipflow.core.repositories.implementations.memory.blob_store import InMemoryBlobStore
from clipflow.core.services.workspace_service import Workspace, WorkspaceRegistry  # noqa: TCH001
from clipflow.utils.logging import get_logger

logger = get_logger(__name__)

if TYPE_CHECKING:
    from clipflow.core.repositories.blob_store import BlobStore


def create_blob_store() -> BlobStore:
    """Build the blob store selected by ``settings.storage_backend``."""
    backend = settings.storage_backend
    logger.info("Using %s storage backend", backend)
    if backend == "memory":
        return InMemoryBlobStore()
    if backend == "supabase":
        from clipflow.core.repositories.implementations.supabase.blob_store import SupabaseBlobStore
        from clipflow.db.base import get_supabase_admin_client

        return SupabaseBlobStore(get_supabase_admin_client(), settings.supabase_blob_table)
    return FileBlobStore(settings.storage_dir)


def get_registry(request: Request) -> WorkspaceRegistry:
    """Return the application-wide workspace registry."""
    return request.app.state.workspaces


async def get_workspace(
    workspace_id: str = Path(..., min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_-]+$"),
    registry: WorkspaceRegistry = Depends(get_registry),
) -> AsyncIterator[Workspace]:
    """Get the workspace addressed by the request path, loading it on first use.

    The workspace lock is held for the whole request so operations on one
    workspace run one at a time; store I/O happens in worker threads.
    """
    async with registry.lock(workspace_id):
        workspace = await asyncio.to_thread(registry.get, workspace_id)
        if workspace.load_error is not None:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail={"code": "storage_unavailable", "message": "Workspace could not be read, try again later"},
            )
        yield workspace
