"""Streaming chat calls: assembling deltas into a response and retrying failures."""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, Protocol

from alexagent.chat import (
    ChatRequest,
    ChatResponse,
    ChatToolCall,
    Choice,
    Function,
    Message,
    StreamChunk,
    StreamDelta,
)

logger = logging.getLogger(__name__)

StreamCallback = Callable[[StreamChunk], None]


class LLMCallError(RuntimeError):
    """Raised when a chat call gives no usable response."""


class InvalidRequestError(ValueError):
    """Raised for a chat request that cannot be sent."""


class StreamingClient(Protocol):
    """A chat client that answers with a stream of deltas."""

    def chat_stream(self, request: ChatRequest) -> Iterable[StreamDelta]: ...


def validate_request(request: ChatRequest | None) -> None:
    """Check that a request exists, has messages and carries a config."""
    if request is None:
        raise InvalidRequestError("request is nil")
    if not request.messages:
        raise InvalidRequestError("no messages in request")
    if request.config is None:
        raise InvalidRequestError("config is nil")


class LLMHandler:
    """Collects streamed responses, forwarding content to an optional callback."""

    def __init__(
        self,
        callback: StreamCallback | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.callback = callback
        self._sleep = sleep

    def _emit(self, kind: str, content: str, **metadata) -> None:
        if self.callback is not None:
            self.callback(StreamChunk(type=kind, content=content, metadata={"streaming": True, **metadata}))

    def collect_streaming_response(self, stream: Iterable[StreamDelta]) -> ChatResponse:
        """Merge a stream of deltas into one complete response."""
        response: ChatResponse | None = None
        content_parts: list[str] = []
        tool_calls: list[ChatToolCall] = []
        current: ChatToolCall | None = None

        for delta in stream:
            if response is None:
                response = ChatResponse(
                    id=delta.id,
                    object=delta.object,
                    created=delta.created,
                    model=delta.model,
                    choices=[Choice(index=0, message=Message(role="assistant"))],
                )
            if not delta.choices:
                continue
            choice = delta.choices[0]
            part = choice.delta

            if part.content:
                content_parts.append(part.content)
                self._emit("llm_content", part.content)
            if part.reasoning:
                self._emit("reasoning", part.reasoning, source="openai_reasoning")
            if part.reasoning_summary:
                self._emit(
                    "reasoning_summary", part.reasoning_summary, source="openai_reasoning_summary"
                )
            if part.think:
                self._emit("think", part.think, source="openai_think")

            for piece in part.tool_calls:
                if piece.id or piece.function.name or current is None:
                    current = ChatToolCall(
                        id=piece.id or f"tool_call_{len(tool_calls)}",
                        type=piece.type,
                        function=Function(
                            name=piece.function.name, arguments=piece.function.arguments
                        ),
                    )
                    tool_calls.append(current)
                elif piece.function.arguments:
                    current.function.arguments += piece.function.arguments

            if choice.finish_reason:
                response.choices[0].finish_reason = choice.finish_reason

        if response is None:
            raise LLMCallError("no response received from stream")
        message = response.choices[0].message
        message.content = "".join(content_parts)
        if tool_calls:
            message.tool_calls = tool_calls
        return response

    def call_with_retry(
        self, client: StreamingClient, request: ChatRequest, max_retries: int
    ) -> ChatResponse:
        """Stream a response, retrying with growing pauses; server errors are not retried."""
        last_error: Exception | None = None
        for attempt in range(1, max_retries + 1):
            try:
                stream = client.chat_stream(request)
            except Exception as exc:  # noqa: BLE001 - any client failure is retried
                last_error = exc
                logger.warning("Stream initialization failed (attempt %d): %s", attempt, exc)
                if "500" in str(exc):
                    raise LLMCallError(
                        f"server error 500 - request format issue: {exc}"
                    ) from exc
            else:
                try:
                    return self.collect_streaming_response(stream)
                except Exception as exc:  # noqa: BLE001 - any stream failure is retried
                    last_error = exc
                    logger.warning(
                        "Failed to collect streaming response (attempt %d): %s", attempt, exc
                    )
            if attempt < max_retries:
                pause = attempt * 2
                logger.warning("Retrying in %ss", pause)
                self._sleep(pause)

        raise LLMCallError(
            f"streaming LLM call failed after {max_retries} attempts: {last_error}"
        ) from last_error