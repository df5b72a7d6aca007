"""Token budgeting and summarisation of long conversations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from alexagent.preservation import ContextPreservationManager, Session, SessionMessage

_MESSAGE_OVERHEAD = 50
_CHARS_PER_TOKEN = 3
_MIN_RECENT = 5
_RECENT_RATIO = 0.2
SUMMARY_TYPE = "context_summary"


@dataclass
class ContextLengthConfig:
    """Limits for context length management."""

    max_tokens: int = 8000
    summarization_threshold: int = 6000
    compression_ratio: float = 0.3
    preserve_system_messages: bool = True


@dataclass
class MessageSummary:
    """A summary of a run of conversation messages."""

    summary: str
    key_points: list[str] = field(default_factory=list)
    topics: list[str] = field(default_factory=list)
    action_items: list[str] = field(default_factory=list)
    decisions: list[str] = field(default_factory=list)
    tokens_used: int = 0


class Summarizer(Protocol):
    """Anything that can condense a list of messages into a summary."""

    def summarize_messages(self, messages: list[SessionMessage]) -> MessageSummary: ...


@dataclass
class ContextAnalysis:
    """How close a session is to its token limit."""

    total_messages: int = 0
    estimated_tokens: int = 0
    requires_trimming: bool = False
    should_summarize: bool = False
    compression_needed: bool = False


@dataclass
class ContextProcessingResult:
    """What context processing did to a session."""

    action: str
    original_count: int
    processed_count: int
    summary: MessageSummary | None = None
    backup_id: str = ""


@dataclass
class ContextStats:
    """Message counts by role and token usage of a session."""

    total_messages: int = 0
    system_messages: int = 0
    user_messages: int = 0
    assistant_messages: int = 0
    summary_messages: int = 0
    estimated_tokens: int = 0
    max_tokens: int = 0


def _is_summary(message: SessionMessage) -> bool:
    return message.metadata.get("type") == SUMMARY_TYPE


def _estimate_tokens(messages: list[SessionMessage]) -> int:
    chars = sum(len(m.content.encode("utf-8")) + _MESSAGE_OVERHEAD for m in messages)
    return chars // _CHARS_PER_TOKEN


def _recent_count(total: int) -> int:
    if total < _MIN_RECENT:
        return total
    return max(int(total * _RECENT_RATIO), _MIN_RECENT)


class ContextManager:
    """Summarises older messages once a session exceeds its token budget."""

    def __init__(
        self,
        summarizer: Summarizer,
        config: ContextLengthConfig | None = None,
        preservation: ContextPreservationManager | None = None,
    ) -> None:
        self.config = config or ContextLengthConfig()
        self.max_context_tokens = self.config.max_tokens
        self.summarizer = summarizer
        self.preservation = preservation or ContextPreservationManager()

    def check_context_length(self, session: Session) -> ContextAnalysis:
        """Estimate the session's tokens and compare them with the limits."""
        messages = list(session.messages)
        if not messages:
            return ContextAnalysis()
        tokens = _estimate_tokens(messages)
        limit = self.max_context_tokens
        return ContextAnalysis(
            total_messages=len(messages),
            estimated_tokens=tokens,
            requires_trimming=tokens > limit,
            should_summarize=tokens > int(limit * 0.75),
            compression_needed=tokens > int(limit * 0.9),
        )

    def process_context_overflow(self, session: Session) -> ContextProcessingResult:
        """Back up the session and replace older messages with a summary when over the limit."""
        analysis = self.check_context_length(session)
        if not analysis.requires_trimming:
            return ContextProcessingResult(
                action="no_action",
                original_count=analysis.total_messages,
                processed_count=analysis.total_messages,
            )

        messages = list(session.messages)
        system = [m for m in messages if m.role == "system"]
        conversation = [m for m in messages if m.role != "system"]
        backup = self.preservation.create_backup(session)

        split = len(conversation) - _recent_count(len(conversation))
        to_summarize, recent = conversation[:split], conversation[split:]
        summary = self.summarizer.summarize_messages(to_summarize)

        now = datetime.now()
        summary_message = SessionMessage(
            role="system",
            content=(
                f"## Conversation Summary\n\n{summary.summary}\n\n---\n\n"
                "The above is a summary of the previous conversation. "
                "Continue from here with full context awareness."
            ),
            metadata={
                "type": SUMMARY_TYPE,
                "original_count": len(to_summarize),
                "summary_timestamp": int(now.timestamp()),
                "backup_id": backup.id,
                "key_points": list(summary.key_points),
                "topics": list(summary.topics),
            },
            timestamp=now,
        )
        new_messages = [*system, summary_message, *recent]

        session.clear_messages()
        for message in new_messages:
            session.add_message(message)

        return ContextProcessingResult(
            action="summarized",
            original_count=len(messages),
            processed_count=len(new_messages),
            summary=summary,
            backup_id=backup.id,
        )

    def restore_full_context(self, session: Session, backup_id: str) -> None:
        """Bring back the complete history saved in a backup."""
        self.preservation.restore_backup(session, backup_id)

    def context_stats(self, session: Session) -> ContextStats:
        """Count the session's messages by role and estimate its tokens."""
        messages = list(session.messages)
        stats = ContextStats(
            total_messages=len(messages),
            estimated_tokens=_estimate_tokens(messages),
            max_tokens=self.max_context_tokens,
        )
        for message in messages:
            if message.role == "system":
                if _is_summary(message):
                    stats.summary_messages += 1
                else:
                    stats.system_messages += 1
            elif message.role == "user":
                stats.user_messages += 1
            elif message.role == "assistant":
                stats.assistant_messages += 1
        return stats