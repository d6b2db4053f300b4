"""
durable_ai - Durable provider adapters for AI services.

Uniform interfaces for LLM chat, embeddings, vector databases, graph
databases, text-to-speech, speech-to-text and full-text search, with a
durability layer that journals every remote call so a restarted worker
resumes without re-issuing side effects or losing in-flight streams:

- **Durable calls**: each remote operation is recorded once and replayed
  from the journal after a restart
- **Durable streams**: streamed results are journaled poll by poll; an
  interrupted stream resumes with a continuation prompt/query
- **Error taxonomy**: one ErrorKind set and HTTP status mapping for all
  providers
- **Config and retry**: option/env lookup and backoff for adapters

Quick Start:
    >>> from durable_ai.llm import DurableLLM, Message, Config
    >>> from durable_ai.llm.openai import OpenAIChatProvider
    >>>
    >>> llm = DurableLLM(OpenAIChatProvider.from_config())
    >>> response = await llm.send([Message.user("Hello")], Config(model="gpt-4o-mini"))
"""

__version__ = "0.1.0"

from durable_ai.config import RetrySettings, optional_config, resolve_config
from durable_ai.durability import (
    DurabilityError,
    DurableStream,
    FunctionType,
    InMemoryJournalHost,
    durable_call,
    get_host,
    set_host,
)
from durable_ai.errors import ErrorKind, ProviderError
from durable_ai.observability import init_logging

__all__ = [
    # Version info
    "__version__",
    # Durability
    "DurabilityError",
    "DurableStream",
    "FunctionType",
    "InMemoryJournalHost",
    "durable_call",
    "get_host",
    "set_host",
    # Errors
    "ErrorKind",
    "ProviderError",
    # Config
    "RetrySettings",
    "optional_config",
    "resolve_config",
    # Logging
    "init_logging",
]
