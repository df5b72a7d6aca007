"""Text rendering and compression of a task's history for prompts."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable

from alexagent.tasks import TaskContext

DEFAULT_MAX_CONTEXT_SIZE = 10
DEFAULT_COMPRESSION_RATIO = 0.7
_RECENT_STEPS = 3
_TOP_FILES = 5


def _rfc3339(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.astimezone()
    text = moment.replace(microsecond=0).isoformat()
    if moment.utcoffset() == timedelta(0):
        text = text[: -len("+00:00")] + "Z"
    return text


class LightContextManager:
    """Renders task history, keeping only the last steps once it grows too long."""

    def __init__(
        self,
        max_context_size: int = DEFAULT_MAX_CONTEXT_SIZE,
        compression_ratio: float = DEFAULT_COMPRESSION_RATIO,
        key_step_threshold: float = 0.8,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.max_context_size = max_context_size
        self.compression_ratio = compression_ratio
        self.key_step_threshold = key_step_threshold
        self._clock = clock or (lambda: datetime.now().astimezone())

    def compress_context(self, context: TaskContext) -> str:
        """Full context when short enough, otherwise the header and the last three steps."""
        if len(context.history) <= self.max_context_size:
            return self.format_full_context(context)
        return self._render(context, context.history[-_RECENT_STEPS:])

    def format_full_context(self, context: TaskContext) -> str:
        """Directory context, goal and every step."""
        return self._render(context, context.history)

    def format_directory_context(self, context: TaskContext) -> str:
        """Current time, working directory and up to five notable entries."""
        lines = [f"Current Time: {_rfc3339(self._clock())}"]
        if context.working_dir:
            lines.append(f"Working Directory: {context.working_dir}")
        info = context.directory_info
        if info is not None:
            lines.append(f"Directory Context: {info.description}")
            if info.top_files:
                lines.append("Key Files:")
                for entry in info.top_files[:_TOP_FILES]:
                    if entry.is_dir:
                        lines.append(f"  📁 {entry.name}/")
                    else:
                        lines.append(f"  📄 {entry.name} ({entry.type})")
        return "\n".join(lines)

    def _render(self, context: TaskContext, steps) -> str:
        parts = [self.format_directory_context(context), f"Goal: {context.goal}"]
        parts.extend(
            f"Step {step.number}: {step.thought} -> {step.observation}" for step in steps
        )
        return "\n".join(parts)