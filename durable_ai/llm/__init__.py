"""
LLM chat domain.

- Types: Message, Response, Config, StreamEvent and friends
- LLMProvider / BaseLLMProvider: adapter interface with default retry_prompt
- DurableLLM / DurableChatStream: journaling wrapper
- ChatSession: conversation history over DurableLLM
- EventSourceStream: SSE-backed provider stream
- OpenAIChatProvider: OpenAI-compatible adapter
"""

from .durable import DurableChatStream, DurableLLM
from .event_stream import EventSourceStream
from .openai import OpenAIChatProvider, OpenAIChatStream, OpenAIClient
from .provider import BaseLLMProvider, ChatStream, LLMProvider, default_retry_prompt
from .session import ChatSession, ChatSessionStream
from .types import (
    ChatEvent,
    ChatRequest,
    Config,
    ContentPart,
    DeltaEvent,
    ErrorEvent,
    FinishEvent,
    ImageUrlPart,
    Message,
    Response,
    ResponseMetadata,
    Role,
    StreamDelta,
    StreamEvent,
    TextPart,
    ToolCall,
    ToolDefinition,
    ToolResult,
    ToolResults,
    Usage,
)

__all__ = [
    # Provider interface
    "BaseLLMProvider",
    "ChatStream",
    "EventSourceStream",
    "LLMProvider",
    "default_retry_prompt",
    # Durable wrapper
    "ChatSession",
    "ChatSessionStream",
    "DurableChatStream",
    "DurableLLM",
    # OpenAI
    "OpenAIChatProvider",
    "OpenAIChatStream",
    "OpenAIClient",
    # Types
    "ChatEvent",
    "ChatRequest",
    "Config",
    "ContentPart",
    "DeltaEvent",
    "ErrorEvent",
    "FinishEvent",
    "ImageUrlPart",
    "Message",
    "Response",
    "ResponseMetadata",
    "Role",
    "StreamDelta",
    "StreamEvent",
    "TextPart",
    "ToolCall",
    "ToolDefinition",
    "ToolResult",
    "ToolResults",
    "Usage",
]
