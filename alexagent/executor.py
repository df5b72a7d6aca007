"""Parsing and serial execution of the tool calls a model asks for."""

from __future__ import annotations

import json
import logging
import math
import os
import time
from typing import Any, Callable, Mapping

from alexagent.chat import Message, StreamChunk
from alexagent.preservation import Session
from alexagent.tasks import AgentTool, ToolCall, ToolResult

logger = logging.getLogger(__name__)

CALLS_BEGIN = "<｜tool▁calls▁begin｜>"
CALLS_END = "<｜tool▁calls▁end｜>"
CALL_BEGIN = "<｜tool▁call▁begin｜>"
CALL_END = "<｜tool▁call▁end｜>"
CALL_SEP = "<｜tool▁sep｜>"

GREEN_DOT = "\033[32m⏺\033[0m"
_RESULT_PREVIEW = 200
_STRING_LIMIT = 50
_COMPLEX_LIMIT = 30
_ARGS_LIMIT = 100

StreamCallback = Callable[[StreamChunk], None]


class ToolNotFoundError(LookupError):
    """Raised when a tool name is not registered."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"tool {tool_name} not found")
        self.tool_name = tool_name


def _parse_arguments(text: str) -> dict[str, Any]:
    """Decode a JSON object of arguments; ``null`` gives an empty mapping."""
    data = json.loads(text)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("tool arguments are not a JSON object")
    return data


def parse_tool_calls(message: Message) -> list[ToolCall]:
    """Tool calls of a message: structured ones first, else those written in its text."""
    calls: list[ToolCall] = []
    for tool_call in message.tool_calls:
        args: dict[str, Any] = {}
        if tool_call.function.arguments:
            try:
                args = _parse_arguments(tool_call.function.arguments)
            except ValueError as exc:
                logger.error("Failed to parse tool arguments: %s", exc)
                continue
        call_id = tool_call.id
        if not call_id:
            call_id = f"call_{time.time_ns()}"
            logger.warning(
                "Missing id for tool %s, generated: %s", tool_call.function.name, call_id
            )
        calls.append(ToolCall(name=tool_call.function.name, arguments=args, call_id=call_id))

    if not calls and message.content:
        calls.extend(parse_text_tool_calls(message.content))
    return calls


def parse_text_tool_calls(content: str) -> list[ToolCall]:
    """Tool calls written in the marked-up text format inside ``content``."""
    start = content.find(CALLS_BEGIN)
    end = content.find(CALLS_END)
    if start == -1 or end == -1 or end <= start:
        return []
    section = content[start : end + len(CALLS_END)]

    calls: list[ToolCall] = []
    for part in section.split(CALL_BEGIN)[1:]:
        if not part:
            continue
        end_index = part.find(CALL_END)
        if end_index == -1:
            continue
        call = parse_text_tool_call(part[:end_index])
        if call is not None:
            calls.append(call)
    return calls


def parse_text_tool_call(call_content: str) -> ToolCall | None:
    """Parse ``function<sep>name`` followed by an optional fenced JSON argument block."""
    parts = call_content.split(CALL_SEP)
    if len(parts) < 2 or parts[0].strip() != "function":
        return None

    lines = parts[1].split("\n")
    tool_name = lines[0].strip()
    if not tool_name:
        return None

    json_start = json_end = -1
    for number, line in enumerate(lines):
        stripped = line.strip()
        if stripped == "```json":
            json_start = number + 1
        elif stripped == "```" and json_start != -1:
            json_end = number
            break

    args: dict[str, Any] = {}
    if json_start != -1 and json_end != -1 and json_end > json_start:
        try:
            args = _parse_arguments("\n".join(lines[json_start:json_end]))
        except ValueError as exc:
            logger.warning("Failed to parse JSON args for tool %s: %s", tool_name, exc)
            args = {}

    return ToolCall(name=tool_name, arguments=args, call_id=f"text_{time.time_ns()}")


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def _plain(value: Any) -> str:
    """Render a value the way a generic value formatter prints it."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        items = " ".join(
            f"{_plain(key)}:{_plain(value[key])}" for key in sorted(value, key=str)
        )
        return f"map[{items}]"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_plain(item) for item in value) + "]"
    return str(value)


def _shorten(text: str, limit: int) -> str:
    return text[: limit - 3] + "..." if len(text) > limit else text


def _format_argument(value: Any) -> str:
    if isinstance(value, str):
        if len(value) > _STRING_LIMIT:
            return f'"{value[: _STRING_LIMIT - 3]}..."'
        return f'"{value}"'
    if isinstance(value, (bool, int, float)):
        return _plain(value)
    return _shorten(_plain(value), _COMPLEX_LIMIT)


def format_tool_call(tool_name: str, args: Mapping[str, Any] | None) -> str:
    """A short, coloured one-line rendering of a tool call."""
    if not args:
        return f"{GREEN_DOT} {tool_name}()"
    rendered = ", ".join(f"{key}={_format_argument(value)}" for key, value in args.items())
    return f"{GREEN_DOT} {tool_name}({_shorten(rendered, _ARGS_LIMIT)})"


class ToolExecutor:
    """Runs registered tools one after another and reports progress."""

    def __init__(
        self,
        tools: Mapping[str, AgentTool],
        session_provider: Callable[[], Session | None] | None = None,
    ) -> None:
        self.tools = tools
        self._session_provider = session_provider or (lambda: None)

    def _tool_context(self) -> dict[str, Any]:
        session = self._session_provider()
        working_dir = session.working_dir if session is not None else ""
        if not working_dir:
            try:
                working_dir = os.getcwd()
            except OSError:
                working_dir = ""
        context: dict[str, Any] = {"working_dir": working_dir}
        if session is not None:
            context["session_id"] = session.id
        return context

    def execute_tool(
        self, tool_name: str, args: dict[str, Any], call_id: str
    ) -> ToolResult:
        """Run one tool; a failing tool gives an unsuccessful result."""
        tool = self.tools.get(tool_name)
        if tool is None:
            raise ToolNotFoundError(tool_name)

        started = time.perf_counter()
        try:
            result = tool.execute(args, self._tool_context())
        except Exception as exc:  # noqa: BLE001 - a tool failure is reported, not raised
            logger.error("Tool %s execution failed: %s", tool_name, exc)
            return ToolResult(
                success=False,
                error=str(exc),
                duration=time.perf_counter() - started,
                tool_name=tool_name,
                tool_args=args,
                call_id=call_id,
            )
        return ToolResult(
            success=True,
            content=result.content,
            data=result.data,
            duration=time.perf_counter() - started,
            tool_name=tool_name,
            tool_args=args,
            call_id=call_id,
        )

    def execute_serial(
        self, tool_calls: list[ToolCall], callback: StreamCallback | None = None
    ) -> list[ToolResult]:
        """Run the calls in order; a failing call does not stop the ones after it."""
        emit = callback or (lambda chunk: None)
        if not tool_calls:
            return [ToolResult(success=False, error="no tool calls provided")]

        results: list[ToolResult] = []
        for call in tool_calls:
            emit(StreamChunk(type="tool_start", content=format_tool_call(call.name, call.arguments)))
            try:
                result = self.execute_tool(call.name, call.arguments, call.call_id)
            except ToolNotFoundError as exc:
                emit(StreamChunk(type="tool_error", content=f"{call.name}: {exc}"))
                results.append(self._failure(call, str(exc)))
                continue

            preview = result.content
            if len(preview) > _RESULT_PREVIEW:
                preview = preview[:_RESULT_PREVIEW] + "..."
            emit(StreamChunk(type="tool_result", content=preview))

            if result.success:
                if not result.tool_name:
                    result.tool_name = call.name
                results.append(result)
            else:
                results.append(self._failure(call, result.error))
                emit(StreamChunk(type="tool_error", content=f"{call.name}: {result.error}"))
        return results

    @staticmethod
    def _failure(call: ToolCall, error: str) -> ToolResult:
        return ToolResult(
            success=False,
            error=error,
            tool_name=call.name,
            tool_args=call.arguments,
            call_id=call.call_id,
        )