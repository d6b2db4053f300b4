"""
Journal host.

The host runtime owns the journal; the durable wrappers only consume three
primitives from it:

- is_live(): True when executing for the first time, False while replaying
- persist(entry): append an entry (live mode)
- replay(operation, function_type): return the next recorded entry

InMemoryJournalHost is the reference implementation. It keeps every entry
in a list and simulates a crash/restart with restart(): the cursor goes
back to the start and the worker replays until it has consumed every
recorded entry, at which point it is live again.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from .persistence import journaling_suppressed
from .types import DurabilityError, FunctionType, JournalEntry, OperationId

logger = logging.getLogger(__name__)


@runtime_checkable
class DurabilityHost(Protocol):
    """Host-supplied journal primitives."""

    def is_live(self) -> bool:
        """True when wrapped calls must execute and be journaled."""
        ...

    async def persist(self, entry: JournalEntry) -> None:
        """Append an entry. Writes under a PERSIST_NOTHING scope are dropped."""
        ...

    async def replay(self, operation: OperationId, function_type: FunctionType) -> JournalEntry:
        """Consume and return the next recorded entry for this operation."""
        ...


class InMemoryJournalHost:
    """
    In-process journal with crash/replay simulation.

    Usage:
        host = InMemoryJournalHost()
        await llm.send(events, config)      # live, one entry written
        host.restart()                      # simulate a crash
        await llm.send(events, config)      # replayed, provider not called
    """

    def __init__(self, entries: Iterable[JournalEntry] | None = None):
        self._entries: list[JournalEntry] = list(entries or [])
        self._cursor = 0
        self._fail_next: Exception | None = None
        self.persist_calls = 0
        self.suppressed_calls = 0
        self.replay_calls = 0

    @property
    def entries(self) -> tuple[JournalEntry, ...]:
        return tuple(self._entries)

    @property
    def cursor(self) -> int:
        return self._cursor

    def is_live(self) -> bool:
        return self._cursor >= len(self._entries)

    async def persist(self, entry: JournalEntry) -> None:
        if journaling_suppressed():
            self.suppressed_calls += 1
            return

        if self._fail_next is not None:
            error, self._fail_next = self._fail_next, None
            raise error

        if not self.is_live():
            raise DurabilityError(
                f"Cannot persist {entry.operation} while replaying "
                f"(cursor={self._cursor}, entries={len(self._entries)})"
            )

        self._entries.append(entry)
        self._cursor = len(self._entries)
        self.persist_calls += 1

    async def replay(self, operation: OperationId, function_type: FunctionType) -> JournalEntry:
        if self.is_live():
            raise DurabilityError(f"Journal exhausted while replaying {operation}")

        entry = self._entries[self._cursor]
        if entry.operation != operation:
            raise DurabilityError(
                f"Unexpected journal entry at {self._cursor}: "
                f"expected {operation}, found {entry.operation}"
            )
        if entry.function_type != function_type:
            raise DurabilityError(
                f"Function type mismatch for {operation}: "
                f"expected {function_type.value}, found {entry.function_type.value}"
            )

        self._cursor += 1
        self.replay_calls += 1
        return entry

    def restart(self, keep: int | None = None) -> None:
        """
        Simulate a worker crash and restart.

        Args:
            keep: Number of entries that survived the crash (default: all)
        """
        if keep is not None:
            del self._entries[keep:]
        self._cursor = 0
        logger.debug(f"Journal restarted with {len(self._entries)} entries to replay")

    def fail_next_persist(self, error: Exception | None = None) -> None:
        """Make the next journal write fail (for testing)."""
        self._fail_next = error or OSError("journal write failed")


# =============================================================================
# Process-wide host
# =============================================================================

_host: DurabilityHost | None = None


def get_host() -> DurabilityHost:
    """Get the process-wide journal host, creating an in-memory one if unset."""
    global _host
    if _host is None:
        _host = InMemoryJournalHost()
    return _host


def set_host(host: DurabilityHost) -> None:
    global _host
    _host = host


def reset_host() -> None:
    """Reset the process-wide host (for testing)."""
    global _host
    _host = None


__all__ = [
    "DurabilityHost",
    "InMemoryJournalHost",
    "get_host",
    "reset_host",
    "set_host",
]
