"""
OpenAI-compatible chat provider.

Talks to the Chat Completions API (OpenAI, OpenRouter, Ollama and other
compatible endpoints) over ProviderClient. Streaming uses SSE.

Configuration:
    OPENAI_API_KEY      required
    OPENAI_ENDPOINT     optional, default https://api.openai.com/v1
    OPENAI_MAX_RETRIES, OPENAI_TIMEOUT, ...   see RetrySettings
"""

from __future__ import annotations

import json
import logging
from typing import Any

from ..config import Options, RetrySettings, config_with_default, resolve_config
from ..errors import ErrorKind, LLMError
from ..http import ProviderClient, ProviderClientConfig
from .event_stream import EventSourceStream
from .provider import BaseLLMProvider, ChatStream
from .types import (
    ChatEvent,
    Config,
    DeltaEvent,
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
    ToolResults,
    Usage,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"


class OpenAIClient(ProviderClient):
    """HTTP client for the Chat Completions API."""

    error_cls = LLMError

    @property
    def name(self) -> str:
        return "openai"

    def _get_auth_headers(self) -> dict[str, str]:
        if not self.config.api_key:
            return {}
        return {"Authorization": f"Bearer {self.config.api_key}"}

    async def create_completion(self, body: dict[str, Any]) -> dict[str, Any]:
        return await self._request_json("POST", "/chat/completions", json=body)

    async def stream_completion(self, body: dict[str, Any]):
        return await self._open_stream(
            "POST",
            "/chat/completions",
            json={**body, "stream": True},
            headers={"Accept": "text/event-stream"},
        )


# =============================================================================
# Conversions
# =============================================================================


def _content_to_openai(parts: list) -> Any:
    if all(isinstance(part, TextPart) for part in parts):
        return "".join(part.text for part in parts)
    converted = []
    for part in parts:
        if isinstance(part, TextPart):
            converted.append({"type": "text", "text": part.text})
        elif isinstance(part, ImageUrlPart):
            image: dict[str, Any] = {"url": part.url}
            if part.detail:
                image["detail"] = part.detail
            converted.append({"type": "image_url", "image_url": image})
    return converted


def events_to_messages(events: list[ChatEvent]) -> list[dict[str, Any]]:
    """Flatten chat events into Chat Completions messages."""
    messages: list[dict[str, Any]] = []
    for event in events:
        if isinstance(event, Message):
            item: dict[str, Any] = {
                "role": event.role.value,
                "content": _content_to_openai(event.content),
            }
            if event.name:
                item["name"] = event.name
            messages.append(item)
        elif isinstance(event, Response):
            item = {"role": Role.ASSISTANT.value, "content": event.text or None}
            if event.tool_calls:
                item["tool_calls"] = [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {"name": call.name, "arguments": call.arguments_json},
                    }
                    for call in event.tool_calls
                ]
            messages.append(item)
        elif isinstance(event, ToolResults):
            for result in event.results:
                content = result.result_json if not result.is_error else json.dumps(
                    {"error": result.error_message, "code": result.error_code}
                )
                messages.append({"role": "tool", "tool_call_id": result.id, "content": content})
    return messages


def config_to_body(events: list[ChatEvent], config: Config) -> dict[str, Any]:
    body: dict[str, Any] = {
        "model": config.model,
        "messages": events_to_messages(events),
    }
    if config.temperature is not None:
        body["temperature"] = config.temperature
    if config.max_tokens is not None:
        body["max_tokens"] = config.max_tokens
    if config.stop_sequences:
        body["stop"] = config.stop_sequences
    if config.tools:
        body["tools"] = [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description or "",
                    "parameters": json.loads(tool.parameters_schema),
                },
            }
            for tool in config.tools
        ]
    if config.tool_choice:
        body["tool_choice"] = config.tool_choice
    body.update(config.provider_options)
    return body


def _usage(raw: dict[str, Any] | None) -> Usage | None:
    if not raw:
        return None
    return Usage(
        input_tokens=raw.get("prompt_tokens"),
        output_tokens=raw.get("completion_tokens"),
        total_tokens=raw.get("total_tokens"),
    )


def _tool_calls(raw: list[dict[str, Any]] | None) -> list[ToolCall]:
    calls = []
    for item in raw or []:
        function = item.get("function") or {}
        calls.append(
            ToolCall(
                id=item.get("id", ""),
                name=function.get("name", ""),
                arguments_json=function.get("arguments", "{}"),
            )
        )
    return calls


def response_from_body(body: dict[str, Any]) -> Response:
    choices = body.get("choices") or []
    if not choices:
        raise LLMError(ErrorKind.INTERNAL, "Response contained no choices", provider="openai")
    choice = choices[0]
    message = choice.get("message") or {}
    content = message.get("content")
    return Response(
        id=body.get("id", ""),
        content=[TextPart(text=content)] if content else [],
        tool_calls=_tool_calls(message.get("tool_calls")),
        metadata=ResponseMetadata(
            finish_reason=choice.get("finish_reason"),
            usage=_usage(body.get("usage")),
            provider_id=body.get("id"),
        ),
    )


class OpenAIChatStream(EventSourceStream):
    """SSE stream of chat.completion.chunk payloads."""

    def decode_message(self, data: str) -> list[StreamEvent] | None:
        try:
            chunk = json.loads(data)
        except json.JSONDecodeError as e:
            raise LLMError(ErrorKind.INTERNAL, f"Invalid stream payload: {e}", provider="openai") from e

        if "error" in chunk:
            error = chunk["error"] or {}
            raise LLMError(
                ErrorKind.INTERNAL,
                str(error.get("message", error)),
                provider="openai",
                provider_error_json=data,
            )

        choices = chunk.get("choices") or []
        if not choices:
            return None
        choice = choices[0]
        events: list[StreamEvent] = []

        delta = choice.get("delta") or {}
        text = delta.get("content")
        tool_calls = _tool_calls(delta.get("tool_calls"))
        if text or tool_calls:
            events.append(
                DeltaEvent(
                    delta=StreamDelta(
                        content=[TextPart(text=text)] if text else None,
                        tool_calls=tool_calls or None,
                    )
                )
            )

        # some servers put the last delta in the chunk that carries finish_reason
        if choice.get("finish_reason"):
            events.append(
                FinishEvent(
                    metadata=ResponseMetadata(
                        finish_reason=choice["finish_reason"],
                        usage=_usage(chunk.get("usage")),
                        provider_id=chunk.get("id"),
                    )
                )
            )

        return events or None


class OpenAIChatProvider(BaseLLMProvider):
    """
    Chat provider for OpenAI-compatible endpoints.

    Example:
        provider = OpenAIChatProvider.from_config()
        llm = DurableLLM(provider)
    """

    def __init__(self, client: OpenAIClient):
        self.client = client

    @classmethod
    def from_config(cls, options: Options | None = None, **client_kwargs: Any) -> OpenAIChatProvider:
        api_key = resolve_config("OPENAI_API_KEY", options, error_cls=LLMError)
        base_url = config_with_default("OPENAI_ENDPOINT", DEFAULT_BASE_URL, options)
        config = ProviderClientConfig(
            base_url=base_url,
            api_key=api_key,
            retry=RetrySettings.from_config("OPENAI", options),
        )
        return cls(OpenAIClient(config, **client_kwargs))

    @property
    def name(self) -> str:
        return "openai"

    async def send(self, events: list[ChatEvent], config: Config) -> Response:
        body = await self.client.create_completion(config_to_body(events, config))
        return response_from_body(body)

    async def stream(self, events: list[ChatEvent], config: Config) -> ChatStream:
        response = await self.client.stream_completion(config_to_body(events, config))
        return OpenAIChatStream(response)


__all__ = [
    "OpenAIChatProvider",
    "OpenAIChatStream",
    "OpenAIClient",
    "config_to_body",
    "events_to_messages",
    "response_from_body",
]
