from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, HTTPException, Response, status

from clipflow.api.v1.errors import raise_for_outcome
from clipflow.api.v1.schemas.note import NoteCreate, NoteFilterRequest, NoteRead, NoteUpdate
from clipflow.core.services.workspace_service import Workspace  # noqa: TCH001
from clipflow.dependencies import get_workspace

router = APIRouter()


@router.post("/", response_model=NoteRead, status_code=status.HTTP_201_CREATED)
async def create_note(
    payload: NoteCreate,
    response: Response,
    workspace: Workspace = Depends(get_workspace),
):
    outcome = await asyncio.to_thread(workspace.add_note, payload.content, payload.tag_refs)
    raise_for_outcome(outcome, response)
    return NoteRead.model_validate(outcome.value)


@router.get("/", response_model=list[NoteRead])
async def list_notes(workspace: Workspace = Depends(get_workspace)):
    return [NoteRead.model_validate(n) for n in workspace.list_notes()]


@router.post("/filter", response_model=list[NoteRead])
async def filter_notes(payload: NoteFilterRequest, workspace: Workspace = Depends(get_workspace)):
    """Notes visible for a tag selection.

    Omitted fields fall back to the workspace's current selection and mode.
    """
    notes = workspace.filtered_notes(payload.active_filters, payload.mode)
    return [NoteRead.model_validate(n) for n in notes]


@router.get("/{note_id}", response_model=NoteRead)
async def get_note(note_id: str, workspace: Workspace = Depends(get_workspace)):
    note = workspace.get_note(note_id)
    if not note:
        raise HTTPException(status_code=404, detail="Note not found")
    return NoteRead.model_validate(note)


@router.patch("/{note_id}", response_model=NoteRead)
async def update_note(
    note_id: str,
    payload: NoteUpdate,
    response: Response,
    workspace: Workspace = Depends(get_workspace),
):
    outcome = await asyncio.to_thread(
        workspace.update_note, note_id, content=payload.content, tag_refs=payload.tag_refs
    )
    raise_for_outcome(outcome, response)
    return NoteRead.model_validate(outcome.value)


@router.post("/{note_id}/toggle-expanded", response_model=NoteRead)
async def toggle_note_expanded(
    note_id: str,
    response: Response,
    workspace: Workspace = Depends(get_workspace),
):
    outcome = await asyncio.to_thread(workspace.toggle_note_expanded, note_id)
    raise_for_outcome(outcome, response)
    return NoteRead.model_validate(outcome.value)


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(
    note_id: str,
    response: Response,
    workspace: Workspace = Depends(get_workspace),
):
    outcome = await asyncio.to_thread(workspace.delete_note, note_id)
    raise_for_outcome(outcome, response)
    return None
