"""Chat messages, requests, responses and streaming records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Function:
    """A function in a tool definition or a tool call."""

    name: str = ""
    description: str = ""
    parameters: dict[str, Any] = field(default_factory=dict)
    arguments: str = ""


@dataclass
class ChatToolCall:
    """A tool call emitted by the model."""

    id: str = ""
    type: str = ""
    function: Function = field(default_factory=Function)

    def to_dict(self) -> dict[str, Any]:
        """Wire form of the call."""
        return {
            "id": self.id,
            "type": self.type,
            "function": {"name": self.function.name, "arguments": self.function.arguments},
        }


@dataclass
class Message:
    """One chat message."""

    role: str
    content: str = ""
    tool_calls: list[ChatToolCall] = field(default_factory=list)
    name: str = ""
    tool_call_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Wire form of the message; empty optional fields are left out."""
        data: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            data["tool_calls"] = [call.to_dict() for call in self.tool_calls]
        if self.name:
            data["name"] = self.name
        if self.tool_call_id:
            data["tool_call_id"] = self.tool_call_id
        return data


@dataclass
class ToolDefinition:
    """A tool offered to the model."""

    function: Function
    type: str = "function"

    def to_dict(self) -> dict[str, Any]:
        """Wire form of the definition."""
        return {
            "type": self.type,
            "function": {
                "name": self.function.name,
                "description": self.function.description,
                "parameters": self.function.parameters,
            },
        }


@dataclass
class ChatRequest:
    """A request for a chat completion."""

    messages: list[Message]
    model_type: str = "basic"
    tools: list[ToolDefinition] = field(default_factory=list)
    tool_choice: str = "auto"
    config: Any = None
    max_tokens: int = 0


@dataclass
class Choice:
    """One completion choice."""

    index: int
    message: Message
    finish_reason: str = ""


@dataclass
class ChatResponse:
    """A complete chat response."""

    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    choices: list[Choice] = field(default_factory=list)


@dataclass
class DeltaContent:
    """The incremental part of a streamed choice."""

    content: str = ""
    reasoning: str = ""
    reasoning_summary: str = ""
    think: str = ""
    tool_calls: list[ChatToolCall] = field(default_factory=list)


@dataclass
class StreamChoice:
    """One choice inside a streamed delta."""

    index: int = 0
    delta: DeltaContent = field(default_factory=DeltaContent)
    finish_reason: str = ""


@dataclass
class StreamDelta:
    """One event of a streamed chat response."""

    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    choices: list[StreamChoice] = field(default_factory=list)


@dataclass
class StreamChunk:
    """A progress event reported to the caller while a task runs."""

    type: str
    content: str = ""
    complete: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Wire form of the chunk; ``complete`` and ``metadata`` only when set."""
        data: dict[str, Any] = {"type": self.type, "content": self.content}
        if self.complete:
            data["complete"] = True
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        return data