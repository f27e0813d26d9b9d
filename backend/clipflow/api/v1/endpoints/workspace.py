from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, Response

from clipflow.api.v1.errors import raise_for_outcome
from clipflow.api.v1.schemas.note import NoteRead
from clipflow.api.v1.schemas.workspace import (
    FilterModeUpdate,
    FilterStateRead,
    FilterToggle,
    UndoResult,
    UndoStatus,
)
from clipflow.core.services.workspace_service import Workspace  # noqa: TCH001
from clipflow.core.taxonomy.filtering import eliminate_redundant
from clipflow.dependencies import get_workspace

router = APIRouter()


def _filter_state(workspace: Workspace) -> FilterStateRead:
    state = workspace.filters
    return FilterStateRead(
        active_filters=state.active_filters,
        mode=state.mode,
        effective_filters=eliminate_redundant(workspace.tree, state.active_filters),
    )


@router.get("/filters", response_model=FilterStateRead)
async def get_filters(workspace: Workspace = Depends(get_workspace)):
    return _filter_state(workspace)


@router.post("/filters/toggle", response_model=FilterStateRead)
async def toggle_filter(payload: FilterToggle, workspace: Workspace = Depends(get_workspace)):
    """Select or deselect a tag; ``All`` clears the selection."""
    workspace.toggle_filter(payload.tag_id)
    return _filter_state(workspace)


@router.put("/filters/mode", response_model=FilterStateRead)
async def set_filter_mode(payload: FilterModeUpdate, workspace: Workspace = Depends(get_workspace)):
    workspace.set_filter_mode(payload.mode)
    return _filter_state(workspace)


@router.delete("/filters", response_model=FilterStateRead)
async def clear_filters(workspace: Workspace = Depends(get_workspace)):
    workspace.clear_filters()
    return _filter_state(workspace)


@router.get("/visible-notes", response_model=list[NoteRead])
async def visible_notes(workspace: Workspace = Depends(get_workspace)):
    """Notes visible under the workspace's current selection."""
    return [NoteRead.model_validate(n) for n in workspace.filtered_notes()]


@router.get("/undo", response_model=UndoStatus)
async def undo_status(workspace: Workspace = Depends(get_workspace)):
    action = workspace.undo_log.peek()
    return UndoStatus(available=action is not None, kind=action.kind if action else None)


@router.post("/undo", response_model=UndoResult)
async def undo(response: Response, workspace: Workspace = Depends(get_workspace)):
    """Reverse the most recent tag deletion, tag rename or note deletion."""
    outcome = await asyncio.to_thread(workspace.undo)
    raise_for_outcome(outcome, response)
    return UndoResult(kind=outcome.value)
