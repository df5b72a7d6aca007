"""Task, step and tool-call records of the reasoning loop."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Protocol, runtime_checkable


@runtime_checkable
class AgentTool(Protocol):
    """A tool the agent can call.

    ``execute`` receives the parsed arguments and a context mapping that may
    hold ``working_dir`` and ``session_id``; it returns a :class:`ToolResult`
    whose ``content`` and ``data`` are reported back, or raises on failure.
    """

    @property
    def name(self) -> str: ...

    @property
    def description(self) -> str: ...

    @property
    def parameters(self) -> dict[str, Any]: ...

    def execute(self, args: dict[str, Any], context: Mapping[str, Any]) -> "ToolResult": ...


@dataclass
class ToolCall:
    """A request from the model to run one tool."""

    name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    call_id: str = ""


@dataclass
class ToolResult:
    """The outcome of running one tool."""

    success: bool
    content: str = ""
    error: str = ""
    data: Any = None
    duration: float = 0.0
    tool_name: str = ""
    tool_args: dict[str, Any] = field(default_factory=dict)
    call_id: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)


@dataclass
class FileInfo:
    """A file or directory entry shown in the directory context."""

    name: str
    is_dir: bool = False
    type: str = ""


@dataclass
class DirectoryInfo:
    """A description of the working directory and its notable entries."""

    description: str = ""
    top_files: list[FileInfo] = field(default_factory=list)


@dataclass
class ExecutionStep:
    """One iteration of the think-act-observe loop."""

    number: int
    timestamp: datetime = field(default_factory=datetime.now)
    thought: str = ""
    action: str = ""
    tool_call: ToolCall | None = None
    result: list[ToolResult] | None = None
    observation: str = ""
    duration: float = 0.0


@dataclass
class TaskContext:
    """State of a task while it is being solved."""

    task_id: str
    goal: str
    working_dir: str = ""
    directory_info: DirectoryInfo | None = None
    memory: str = ""
    history: list[ExecutionStep] = field(default_factory=list)
    start_time: datetime = field(default_factory=datetime.now)
    last_update: datetime = field(default_factory=datetime.now)
    tokens_used: int = 0


@dataclass
class TaskResult:
    """The final outcome of a task."""

    success: bool
    answer: str
    confidence: float
    steps: list[ExecutionStep] = field(default_factory=list)
    duration: float = 0.0
    tokens_used: int = 0


def generate_task_id() -> str:
    """Return a unique task id of the form ``task_<nanoseconds>_<0..999>``."""
    return f"task_{time.time_ns()}_{random.randrange(1000)}"


def build_final_result(
    task_ctx: TaskContext, answer: str, confidence: float, success: bool
) -> TaskResult:
    """Wrap a finished task context into a :class:`TaskResult`."""
    elapsed = (datetime.now() - task_ctx.start_time).total_seconds()
    return TaskResult(
        success=success,
        answer=answer,
        confidence=confidence,
        steps=task_ctx.history,
        duration=elapsed,
        tokens_used=task_ctx.tokens_used,
    )