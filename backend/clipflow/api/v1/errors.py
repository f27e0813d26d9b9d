from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import HTTPException, status

from clipflow.core.schemas.outcome import ErrorCode

if TYPE_CHECKING:
    from fastapi import Response

    from clipflow.core.schemas.outcome import Outcome

PERSIST_WARNING_HEADER = "X-Persist-Warning"

ERROR_STATUS: dict[ErrorCode, int] = {
    ErrorCode.TAG_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.NOTE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.PARENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.DUPLICATE_NAME: status.HTTP_409_CONFLICT,
    ErrorCode.EMPTY_NAME: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.EMPTY_CONTENT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.INDEX_OUT_OF_RANGE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOTHING_TO_UNDO: status.HTTP_409_CONFLICT,
    ErrorCode.UNDO_TARGET_INVALID: status.HTTP_409_CONFLICT,
}


def raise_for_outcome(outcome: Outcome, response: Response | None = None) -> None:
    """Turn a failed outcome into an HTTP error and surface save warnings."""
    if not outcome.ok:
        raise HTTPException(
            status_code=ERROR_STATUS.get(outcome.error, status.HTTP_400_BAD_REQUEST),
            detail={"code": outcome.error.value, "message": outcome.message},
        )
    if response is not None and outcome.warning:
        response.headers[PERSIST_WARNING_HEADER] = outcome.warning
