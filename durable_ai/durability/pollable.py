"""
Notifiers for streams.

A Pollable tells a caller when a stream may have data. Provider streams
hand out their own pollables; a durable stream in replay mode hands out
LazyPollable subscriptions instead, which start unbound and are attached
to the live upstream's pollable exactly once when the stream goes live.
Callers keep the same object across the switch.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

from .types import DurabilityError


class Pollable(ABC):
    """Readiness notifier."""

    @abstractmethod
    def ready(self) -> bool:
        """True if a poll would not wait."""
        ...

    @abstractmethod
    async def block(self) -> None:
        """Wait until ready."""
        ...


class ReadyPollable(Pollable):
    """Always ready. Used by streams whose poll_next awaits I/O itself."""

    def ready(self) -> bool:
        return True

    async def block(self) -> None:
        await asyncio.sleep(0)


class EventPollable(Pollable):
    """Pollable backed by an asyncio.Event the stream owner sets and clears."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def notify(self) -> None:
        self._event.set()

    def clear(self) -> None:
        self._event.clear()

    def ready(self) -> bool:
        return self._event.is_set()

    async def block(self) -> None:
        await self._event.wait()


class LazyPollable:
    """
    Indirection handle that can be bound to a real pollable once.

    Subscriptions taken before binding wait until set() and then forward
    to the bound pollable.
    """

    def __init__(self) -> None:
        self._target: Pollable | None = None
        self._bound = asyncio.Event()
        self.set_count = 0

    @property
    def is_set(self) -> bool:
        return self._target is not None

    @property
    def target(self) -> Pollable | None:
        return self._target

    def set(self, pollable: Pollable) -> None:
        if self._target is not None:
            raise DurabilityError("Lazy pollable is already bound")
        self._target = pollable
        self.set_count += 1
        self._bound.set()

    def subscribe(self) -> Pollable:
        return _LazySubscription(self)

    def clear(self) -> None:
        self._target = None


class _LazySubscription(Pollable):
    def __init__(self, lazy: LazyPollable):
        self._lazy = lazy

    @property
    def lazy(self) -> LazyPollable:
        return self._lazy

    def ready(self) -> bool:
        target = self._lazy.target
        return target is not None and target.ready()

    async def block(self) -> None:
        await self._lazy._bound.wait()
        target = self._lazy.target
        if target is None:
            raise DurabilityError("Lazy pollable was released while blocked")
        await target.block()


__all__ = [
    "EventPollable",
    "LazyPollable",
    "Pollable",
    "ReadyPollable",
]
