"""
Durability layer.

Record/replay wrappers that make remote, side-effecting and streaming
provider calls survive worker restarts:

- durable_call(): journal one call's (input, outcome) or replay it
- DurableStream: Replay -> Live state machine for streamed results
- LazyPollable: notifier handed out before a live stream exists
- InMemoryJournalHost: reference journal host with crash simulation
"""

from .durability import Durability, durable_call, serialize_input
from .host import DurabilityHost, InMemoryJournalHost, get_host, reset_host, set_host
from .persistence import (
    current_persistence_level,
    journaling_suppressed,
    persistence_level,
    suppress_journaling,
)
from .pollable import EventPollable, LazyPollable, Pollable, ReadyPollable
from .stream import (
    DurableStream,
    FailedStream,
    PassthroughStream,
    ProviderStream,
    open_durable_stream,
)
from .types import DurabilityError, FunctionType, JournalEntry, OperationId, PersistenceLevel
from .wrapper import DurableWrapper

__all__ = [
    # Journal
    "DurabilityError",
    "DurabilityHost",
    "FunctionType",
    "InMemoryJournalHost",
    "JournalEntry",
    "OperationId",
    "PersistenceLevel",
    "get_host",
    "reset_host",
    "set_host",
    # Calls
    "Durability",
    "durable_call",
    "serialize_input",
    # Persistence scope
    "current_persistence_level",
    "journaling_suppressed",
    "persistence_level",
    "suppress_journaling",
    # Streams
    "DurableStream",
    "DurableWrapper",
    "EventPollable",
    "FailedStream",
    "LazyPollable",
    "PassthroughStream",
    "Pollable",
    "ProviderStream",
    "ReadyPollable",
    "open_durable_stream",
]
