from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, HTTPException, Response, status

from clipflow.api.v1.errors import raise_for_outcome
from clipflow.api.v1.schemas.tag import (
    TagClosure,
    TagCreate,
    TagDeleteResult,
    TagMove,
    TagRead,
    TagRename,
)
from clipflow.core.models.tag import TagNode  # noqa: TCH001
from clipflow.core.schemas.taxonomy import TagTaxonomy
from clipflow.core.services.taxonomy_service import build_workspace_taxonomy
from clipflow.core.services.workspace_service import Workspace  # noqa: TCH001
from clipflow.dependencies import get_workspace

router = APIRouter()
taxonomy_router = APIRouter()


def _tag_read(workspace: Workspace, node: TagNode) -> TagRead:
    return TagRead(
        id=node.id,
        name=node.name,
        parent_id=node.parent_id,
        children=[child.id for child in workspace.get_children(node.id)],
        path=workspace.get_path(node.id) or [],
        full_name=workspace.get_full_name(node.id),
    )


def _existing_tag(workspace: Workspace, tag_id: str) -> TagNode:
    node = workspace.get_tag(tag_id)
    if node is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    return node


@router.get("/", response_model=list[TagRead])
async def list_tags(parent_id: str | None = None, workspace: Workspace = Depends(get_workspace)):
    """List top-level tags, or the children of ``parent_id``, in display order."""
    if parent_id is not None:
        _existing_tag(workspace, parent_id)
    return [_tag_read(workspace, node) for node in workspace.get_children(parent_id)]


@router.get("/search", response_model=list[TagRead])
async def search_tags(q: str = "", workspace: Workspace = Depends(get_workspace)):
    return [_tag_read(workspace, node) for node in workspace.find_tags(q)]


@router.post("/", response_model=TagRead, status_code=status.HTTP_201_CREATED)
async def create_tag(
    payload: TagCreate,
    response: Response,
    workspace: Workspace = Depends(get_workspace),
):
    outcome = await asyncio.to_thread(workspace.create_tag, payload.name, payload.parent_id)
    raise_for_outcome(outcome, response)
    return _tag_read(workspace, workspace.get_tag(outcome.value))


@router.post("/move", status_code=status.HTTP_204_NO_CONTENT)
async def move_tag(
    payload: TagMove,
    response: Response,
    workspace: Workspace = Depends(get_workspace),
):
    """Reorder a tag among its siblings."""
    outcome = await asyncio.to_thread(workspace.move_tag, payload.parent_id, payload.from_index, payload.to_index)
    raise_for_outcome(outcome, response)
    return None


@router.get("/{tag_id}", response_model=TagRead)
async def get_tag(tag_id: str, workspace: Workspace = Depends(get_workspace)):
    return _tag_read(workspace, _existing_tag(workspace, tag_id))


@router.get("/{tag_id}/closure", response_model=TagClosure)
async def get_descendant_closure(tag_id: str, workspace: Workspace = Depends(get_workspace)):
    """Return the tag id together with the ids of all of its descendants."""
    _existing_tag(workspace, tag_id)
    return TagClosure(tag_id=tag_id, ids=sorted(workspace.descendant_closure(tag_id)))


@router.patch("/{tag_id}", response_model=TagRead)
async def rename_tag(
    tag_id: str,
    payload: TagRename,
    response: Response,
    workspace: Workspace = Depends(get_workspace),
):
    outcome = await asyncio.to_thread(workspace.rename_tag, tag_id, payload.name)
    raise_for_outcome(outcome, response)
    return _tag_read(workspace, workspace.get_tag(tag_id))


@router.delete("/{tag_id}", response_model=TagDeleteResult)
async def delete_tag(
    tag_id: str,
    response: Response,
    workspace: Workspace = Depends(get_workspace),
):
    """Delete a tag with its subtree. Deleting an unknown tag is a no-op."""
    outcome = await asyncio.to_thread(workspace.delete_tag, tag_id)
    raise_for_outcome(outcome, response)
    snapshot = outcome.value
    removed = [node.id for node in snapshot.nodes] if snapshot is not None else []
    return TagDeleteResult(tag_id=tag_id, removed_ids=removed)


@taxonomy_router.get("/taxonomy", response_model=TagTaxonomy)
async def get_taxonomy(workspace: Workspace = Depends(get_workspace)) -> TagTaxonomy:
    """Return the whole tag tree, nested and in display order."""
    return build_workspace_taxonomy(workspace)
