"""Session context checks and overflow handling for the reasoning loop."""

from __future__ import annotations

import logging
from typing import Callable

from alexagent.chat import Message, StreamChunk
from alexagent.manager import (
    ContextLengthConfig,
    ContextManager,
    ContextProcessingResult,
    ContextStats,
    Summarizer,
)
from alexagent.preservation import ContextPreservationManager, Session

logger = logging.getLogger(__name__)

StreamCallback = Callable[[StreamChunk], None]

TODO_INSTRUCTION = (
    "\n\n think about the task and break it down into a list of todos "
    "and then call the todo_update tool to create the todos"
)


class ContextHandler:
    """Keeps a session's context within budget and builds the opening messages of a task."""

    def __init__(self, context_manager: ContextManager | None = None) -> None:
        self.context_manager = context_manager

    @classmethod
    def from_summarizer(
        cls,
        summarizer: Summarizer,
        preservation: ContextPreservationManager | None = None,
    ) -> "ContextHandler":
        """A handler with the conservative default token limits."""
        config = ContextLengthConfig(
            max_tokens=8000,
            summarization_threshold=6000,
            compression_ratio=0.3,
            preserve_system_messages=True,
        )
        return cls(ContextManager(summarizer, config, preservation))

    def handle_context_overflow(
        self, session: Session, callback: StreamCallback | None = None
    ) -> ContextProcessingResult | None:
        """Summarise the session when it is over its limit; ``None`` when nothing was done."""
        if self.context_manager is None:
            return None
        analysis = self.context_manager.check_context_length(session)
        if not analysis.requires_trimming:
            return None

        if callback is not None:
            callback(
                StreamChunk(
                    type="context_management",
                    content=(
                        f"⚠️ Context overflow detected ({analysis.estimated_tokens} tokens), "
                        "summarizing conversation..."
                    ),
                    metadata={"action": "summarizing", "tokens": analysis.estimated_tokens},
                )
            )

        result = self.context_manager.process_context_overflow(session)

        if callback is not None:
            callback(
                StreamChunk(
                    type="context_management",
                    content=(
                        f"✅ Context summarized: {result.original_count} → "
                        f"{result.processed_count} messages (backup: {result.backup_id})"
                    ),
                    metadata={"action": "completed", "backup_id": result.backup_id},
                )
            )
        logger.info(
            "Context summarized: %s, %d → %d messages",
            result.action,
            result.original_count,
            result.processed_count,
        )
        return result

    @staticmethod
    def build_messages(task: str, system_prompt: str) -> list[Message]:
        """The system prompt followed by the task as a user message."""
        return [
            Message(role="system", content=system_prompt),
            Message(role="user", content=task + TODO_INSTRUCTION),
        ]

    def context_stats(self, session: Session | None) -> ContextStats:
        """Context statistics of the session, or empty ones without a manager or session."""
        if self.context_manager is None or session is None:
            return ContextStats()
        return self.context_manager.context_stats(session)

    def force_summarization(self, session: Session) -> ContextProcessingResult:
        """Run overflow processing now."""
        if self.context_manager is None:
            raise RuntimeError("context manager not available")
        return self.context_manager.process_context_overflow(session)

    def restore_full_context(self, session: Session, backup_id: str) -> None:
        """Bring back the history saved in a backup."""
        if self.context_manager is None:
            raise RuntimeError("context manager not available")
        self.context_manager.restore_full_context(session, backup_id)