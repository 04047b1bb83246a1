"""Transport-agnostic entry point for one batch request.

A caller (HTTP view, RPC method, the ``batch`` CLI command) hands over the
decoded request body and sends back the returned dict. The caller repeats the
request with the same statuses until ``completed`` is true.
"""
from __future__ import annotations
from typing import Any, Dict, List, Mapping

from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator

from .dedupe import DEFAULT_BATCH_SIZE, DuplicateFinder, clamp_batch_size
from .errors import (
    INVALID_REQUEST_MESSAGE,
    INVALID_STATUSES_MESSAGE,
    NO_STATUSES_SELECTED_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
)
from .models import BatchResult, CommentStatus, filter_statuses
from .store import CommentStore
from .util import plural


class BatchRequest(BaseModel):
    statuses: List[str] = Field(default_factory=list)
    batch_size: int = DEFAULT_BATCH_SIZE

    @field_validator("statuses", mode="before")
    @classmethod
    def _coerce_statuses(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (str, int)) and not isinstance(value, bool):
            value = [value]
        if isinstance(value, (list, tuple, set)):
            return [
                v.value if isinstance(v, CommentStatus) else str(v).strip()
                for v in value
                if not isinstance(v, bool)
            ]
        return value

    @field_validator("batch_size", mode="before")
    @classmethod
    def _clamp_batch_size(cls, value: Any) -> int:
        if value is None:
            return DEFAULT_BATCH_SIZE
        return clamp_batch_size(value)


def format_batch_message(processed: int, trashed: int) -> str:
    processed_text = f"Processed {processed} {plural(processed, 'comment', 'comments')}"
    trashed_text = f"moved {trashed} {plural(trashed, 'duplicate', 'duplicates')} to the trash"
    return f"{processed_text}, {trashed_text}."


def error_response(message: str, legacy_fields: bool) -> Dict[str, Any]:
    data = BatchResult.failure(message).as_dict(legacy_fields)
    data["message"] = None
    return data


def handle_batch_request(
    store: CommentStore,
    payload: Mapping[str, Any],
    legacy_fields: bool = True,
) -> Dict[str, Any]:
    """Run one batch for ``payload`` ({"statuses": [...], "batch_size": n}).

    Always returns a response dict; internal errors are logged and reported
    with a generic message.
    """
    try:
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            logger.warning(f"Rejected batch request: expected an object, got {type(payload).__name__}")
            return error_response(INVALID_REQUEST_MESSAGE, legacy_fields)
        try:
            request = BatchRequest.model_validate(dict(payload))
        except ValidationError as e:
            logger.warning(f"Rejected batch request: {e}")
            return error_response(INVALID_REQUEST_MESSAGE, legacy_fields)

        if not request.statuses:
            return error_response(NO_STATUSES_SELECTED_MESSAGE, legacy_fields)

        statuses = filter_statuses(request.statuses)
        if not statuses:
            return error_response(INVALID_STATUSES_MESSAGE, legacy_fields)

        finder = DuplicateFinder(store)
        result = finder.process(statuses, request.batch_size)

        if result.error:
            return error_response(result.error, legacy_fields)

        data = result.as_dict(legacy_fields)
        data["message"] = format_batch_message(result.processed, result.trashed)
        return data
    except Exception:
        logger.exception("Unexpected error while processing duplicate comments")
        return error_response(UNEXPECTED_ERROR_MESSAGE, legacy_fields)
