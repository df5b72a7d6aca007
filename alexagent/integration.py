"""Context management wired into message processing, with slash commands."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from alexagent.manager import (
    ContextAnalysis,
    ContextLengthConfig,
    ContextManager,
    ContextProcessingResult,
    ContextStats,
    Summarizer,
)
from alexagent.preservation import ContextPreservationManager, Session

logger = logging.getLogger(__name__)


class ContextManagementDisabledError(RuntimeError):
    """Raised when an operation needs context management while it is disabled."""

    def __init__(self) -> None:
        super().__init__("context management is disabled")


class UnknownCommandError(ValueError):
    """Raised for a slash command that is not a context management command."""

    def __init__(self, command: str) -> None:
        super().__init__(f"unknown context management command: {command}")
        self.command = command


@dataclass
class IntegrationConfig:
    """Whether context management runs and whether it trims automatically."""

    enabled: bool = True
    auto_trimming: bool = True
    context_length_config: ContextLengthConfig = field(default_factory=ContextLengthConfig)


class ReactAgentContextIntegration:
    """Checks and trims a session's context around message processing."""

    def __init__(
        self,
        summarizer: Summarizer,
        config: IntegrationConfig | None = None,
        preservation: ContextPreservationManager | None = None,
    ) -> None:
        config = config or IntegrationConfig()
        self.context_manager = ContextManager(
            summarizer, config.context_length_config, preservation
        )
        self.enabled = config.enabled
        self.auto_trimming = config.auto_trimming

    def process_message(
        self,
        session: Session,
        user_message: str,
        process: Callable[[Session, str], Any],
    ) -> Any:
        """Trim the context if needed, then hand the message to ``process``.

        A failure while trimming is logged and does not stop processing.
        """
        if self.enabled and self.auto_trimming:
            try:
                self._check_and_process_overflow(session)
            except Exception as exc:  # noqa: BLE001 - processing continues regardless
                logger.warning("Context management failed: %s", exc)
        return process(session, user_message)

    def check_context_status(self, session: Session) -> ContextAnalysis:
        """Analyse the session's context length."""
        if not self.enabled:
            return ContextAnalysis(total_messages=session.message_count())
        return self.context_manager.check_context_length(session)

    def force_context_summarization(self, session: Session) -> ContextProcessingResult:
        """Run context overflow processing now."""
        if not self.enabled:
            raise ContextManagementDisabledError()
        return self.context_manager.process_context_overflow(session)

    def restore_full_context(self, session: Session, backup_id: str) -> None:
        """Restore the complete history from a backup."""
        if not self.enabled:
            raise ContextManagementDisabledError()
        self.context_manager.restore_full_context(session, backup_id)

    def context_stats(self, session: Session) -> ContextStats:
        """Detailed statistics of the session's context."""
        if not self.enabled:
            return ContextStats(total_messages=session.message_count())
        return self.context_manager.context_stats(session)

    def enable(self) -> None:
        """Turn context management on."""
        self.enabled = True

    def disable(self) -> None:
        """Turn context management off."""
        self.enabled = False

    def _check_and_process_overflow(self, session: Session) -> None:
        analysis = self.context_manager.check_context_length(session)
        if not analysis.requires_trimming:
            return
        logger.info(
            "Context overflow detected, processing %d messages", analysis.total_messages
        )
        result = self.context_manager.process_context_overflow(session)
        logger.info(
            "Context processed: %s, %d -> %d messages (backup: %s)",
            result.action,
            result.original_count,
            result.processed_count,
            result.backup_id,
        )


def _flag(value: bool) -> str:
    return "true" if value else "false"


def _usage(used: int, limit: int) -> str:
    if limit == 0:
        if used == 0:
            return "NaN"
        return "+Inf" if used > 0 else "-Inf"
    value = used / limit * 100
    return "NaN" if math.isnan(value) else f"{value:.1f}"


class ContextManagementSlashCommands:
    """Text commands that inspect and control context management."""

    def __init__(self, integration: ReactAgentContextIntegration) -> None:
        self.integration = integration

    def handle(self, session: Session, command: str, args: Sequence[str]) -> str:
        """Run a ``context-*`` command and return its report."""
        if command == "context-status":
            return self._status(session)
        if command == "context-summarize":
            return self._summarize(session)
        if command == "context-restore":
            if not args:
                raise ValueError("backup ID required for context-restore command")
            return self._restore(session, args[0])
        if command == "context-stats":
            return self._stats(session)
        if command == "context-enable":
            self.integration.enable()
            return "✅ Context management enabled"
        if command == "context-disable":
            self.integration.disable()
            return "⚠️ Context management disabled"
        raise UnknownCommandError(command)

    def _status(self, session: Session) -> str:
        analysis = self.integration.check_context_status(session)
        return (
            "📊 Context Status:\n"
            f"• Total Messages: {analysis.total_messages}\n"
            f"• Estimated Tokens: {analysis.estimated_tokens}\n"
            f"• Requires Trimming: {_flag(analysis.requires_trimming)}\n"
            f"• Should Summarize: {_flag(analysis.should_summarize)}\n"
            f"• Compression Needed: {_flag(analysis.compression_needed)}"
        )

    def _summarize(self, session: Session) -> str:
        result = self.integration.force_context_summarization(session)
        return (
            "✅ Context summarized:\n"
            f"• Action: {result.action}\n"
            f"• Messages: {result.original_count} → {result.processed_count}\n"
            f"• Backup ID: {result.backup_id}"
        )

    def _restore(self, session: Session, backup_id: str) -> str:
        self.integration.restore_full_context(session, backup_id)
        return f"✅ Context restored from backup: {backup_id}"

    def _stats(self, session: Session) -> str:
        stats = self.integration.context_stats(session)
        return (
            "📈 Detailed Context Stats:\n"
            f"• Total Messages: {stats.total_messages}\n"
            f"• System Messages: {stats.system_messages}\n"
            f"• User Messages: {stats.user_messages}\n"
            f"• Assistant Messages: {stats.assistant_messages}\n"
            f"• Summary Messages: {stats.summary_messages}\n"
            f"• Estimated Tokens: {stats.estimated_tokens} / {stats.max_tokens}\n"
            f"• Usage: {_usage(stats.estimated_tokens, stats.max_tokens)}%"
        )