"""Exception types and the messages shown to callers.

Diagnostic detail (SQL errors, tracebacks) goes to the log only; callers get
one of the fixed messages below.
"""
from __future__ import annotations

INVALID_STATUSES_MESSAGE = "Invalid comment statuses provided."
NO_VALID_STATUSES_MESSAGE = "No valid comment statuses provided."
NO_STATUSES_SELECTED_MESSAGE = "No comment statuses selected."
STORAGE_ERROR_MESSAGE = "Database error occurred while finding duplicate comments."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."
INVALID_REQUEST_MESSAGE = "Invalid request."


class DedupeError(Exception):
    """Base class for errors raised by this package."""


class StorageError(DedupeError):
    """A query against the comment store failed."""
