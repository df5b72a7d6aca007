"""Tool definitions, tool result messages and observations for the reasoning loop."""

from __future__ import annotations

import logging
import time
from typing import Iterable, Mapping

from alexagent.chat import Function, Message, ToolDefinition
from alexagent.tasks import AgentTool, ToolResult

logger = logging.getLogger(__name__)

NO_RESULT = "No tool execution result to observe"
_TOOL_LINE_PREFIX = "🔧 "
_OBSERVATION_LENGTH = 100
_SUMMARY_LENGTH = 50

_OBSERVATION_LABELS = {
    "think": "🧠 Thinking completed",
    "todo_update": "📋 Todo management",
    "file_read": "📖 File read",
    "bash": "⚡ Command executed",
}


def build_tool_definitions(
    tools: Mapping[str, AgentTool] | Iterable[AgentTool],
) -> list[ToolDefinition]:
    """Describe every tool as a function the model may call."""
    values = tools.values() if isinstance(tools, Mapping) else tools
    return [
        ToolDefinition(
            function=Function(
                name=tool.name,
                description=tool.description,
                parameters=tool.parameters,
            )
        )
        for tool in values
    ]


def build_tool_messages(results: Iterable[ToolResult]) -> list[Message]:
    """Turn tool results into messages that report them back to the model."""
    messages = []
    for result in results:
        content = result.content if result.success else result.error
        call_id = result.call_id
        if not call_id:
            call_id = f"tool_{time.time_ns()}"
            logger.warning(
                "Missing call id for tool %s, generated: %s", result.tool_name, call_id
            )
        messages.append(
            Message(
                role="user",
                content=content,
                name=result.tool_name,
                tool_call_id=call_id,
            )
        )
    return messages


def generate_observation(results: list[ToolResult] | None) -> str:
    """A one-line observation describing the first tool result."""
    if not results:
        return NO_RESULT
    result = results[0]
    if not result.success:
        return f"❌ Tool execution failed: {result.error}"
    if result.tool_calls:
        tool_name = result.tool_calls[0].name
        summary = truncate_content(clean_tool_output(result.content), _OBSERVATION_LENGTH)
        label = _OBSERVATION_LABELS.get(tool_name, f"✅ {tool_name} completed")
        return f"{label}: {summary}"
    summary = truncate_content(clean_tool_output(result.content), _OBSERVATION_LENGTH)
    return f"✅ Tool execution successful: {summary}"


def clean_tool_output(content: str) -> str:
    """Keep only tool-call lines (``🔧 ...``), or a short excerpt when there are none."""
    lines = [
        stripped
        for stripped in (line.strip() for line in content.split("\n"))
        if stripped.startswith(_TOOL_LINE_PREFIX)
    ]
    if not lines:
        return truncate_content(content, _SUMMARY_LENGTH)
    return "\n".join(lines)


def truncate_content(content: str, max_len: int) -> str:
    """Cut ``content`` to ``max_len`` characters, marking the cut with ``...``."""
    if max_len <= 0:
        return ""
    if len(content) <= max_len:
        return content
    return content[:max_len] + "..."