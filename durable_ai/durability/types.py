"""
Journal data types.

A journal entry is (operation-id, function-type, input, outcome). Inputs and
outputs are stored as JSON-compatible values so the host can persist them
however it likes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class FunctionType(str, Enum):
    """Hint to the host about replay policy for an entry."""

    READ_REMOTE = "read-remote"
    WRITE_REMOTE = "write-remote"
    READ_LOCAL = "read-local"
    WRITE_LOCAL = "write-local"


class PersistenceLevel(Enum):
    """How much journaling is allowed in the current scope."""

    PERSIST_NOTHING = "persist-nothing"
    PERSIST_REMOTE_SIDE_EFFECTS = "persist-remote-side-effects"
    SMART = "smart"


@dataclass(frozen=True)
class OperationId:
    """Stable (namespace, function) pair identifying a wrapped operation."""

    namespace: str
    function: str

    def __str__(self) -> str:
        return f"{self.namespace}.{self.function}"


@dataclass(frozen=True)
class JournalEntry:
    """
    One recorded call.

    Attributes:
        operation: Which wrapped operation produced the entry
        function_type: Replay policy hint
        input: JSON-compatible request value
        ok: True for ok(output), False for err(output)
        output: JSON-compatible output, or the error payload when ok is False
    """

    operation: OperationId
    function_type: FunctionType
    input: Any
    ok: bool
    output: Any


class DurabilityError(RuntimeError):
    """
    Fatal durability failure.

    Raised when the journal cannot be written, when replay yields an entry
    of the wrong shape, or when a stream's state invariant is broken. Never
    journaled and never retried.
    """


__all__ = [
    "DurabilityError",
    "FunctionType",
    "JournalEntry",
    "OperationId",
    "PersistenceLevel",
]
