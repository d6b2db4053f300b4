"""
Persistence-scope guard.

While a PERSIST_NOTHING scope is active, hosts drop any journal writes made
by code running under it. The level lives in a ContextVar, so it follows
the current task across awaits and never leaks into other tasks.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from .types import PersistenceLevel

_persistence_level: ContextVar[PersistenceLevel] = ContextVar(
    "durable_ai_persistence_level", default=PersistenceLevel.SMART
)


def current_persistence_level() -> PersistenceLevel:
    return _persistence_level.get()


def journaling_suppressed() -> bool:
    return _persistence_level.get() == PersistenceLevel.PERSIST_NOTHING


@contextmanager
def persistence_level(level: PersistenceLevel) -> Iterator[None]:
    """
    Run a block at the given persistence level.

    Example:
        with persistence_level(PersistenceLevel.PERSIST_NOTHING):
            result = await provider.send(events, config)
    """
    token = _persistence_level.set(level)
    try:
        yield
    finally:
        _persistence_level.reset(token)


def suppress_journaling():
    """Shorthand for persistence_level(PERSIST_NOTHING)."""
    return persistence_level(PersistenceLevel.PERSIST_NOTHING)


__all__ = [
    "current_persistence_level",
    "journaling_suppressed",
    "persistence_level",
    "suppress_journaling",
]
