"""Command registration for the dupcomments CLI."""
from __future__ import annotations

from typing import Iterable

from . import batch, dedupe, report

COMMAND_MODULES: Iterable = (dedupe, report, batch)

__all__ = ["COMMAND_MODULES"]
