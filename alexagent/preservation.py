"""Sessions and on-disk backups of their conversation history."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_BACKUP_DIR_NAME = ".deep-coding-context-backups"
_FALLBACK_DIR_NAME = "deep-coding-context-backups"


class BackupError(Exception):
    """Raised when a backup cannot be read, listed or applied."""


@dataclass
class SessionMessage:
    """One message of a conversation session."""

    role: str
    content: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form of the message."""
        return {
            "role": self.role,
            "content": self.content,
            "metadata": self.metadata,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionMessage":
        """Rebuild a message from :meth:`to_dict` output."""
        stamp = data.get("timestamp")
        return cls(
            role=data.get("role", ""),
            content=data.get("content", ""),
            metadata=dict(data.get("metadata") or {}),
            timestamp=datetime.fromisoformat(stamp) if stamp else datetime.now(),
        )


@dataclass
class Session:
    """A conversation: its id, working directory, settings and messages."""

    id: str
    working_dir: str = ""
    config: dict[str, Any] = field(default_factory=dict)
    context: str = ""
    messages: list[SessionMessage] = field(default_factory=list)

    def add_message(self, message: SessionMessage) -> None:
        """Append a message to the conversation."""
        self.messages.append(message)

    def clear_messages(self) -> None:
        """Remove every message."""
        self.messages.clear()

    def message_count(self) -> int:
        """Number of messages in the conversation."""
        return len(self.messages)


@dataclass
class ContextBackup:
    """A complete copy of a session's history."""

    id: str
    session_id: str
    messages: list[SessionMessage]
    created_at: datetime
    metadata: dict[str, Any] = field(default_factory=dict)
    original_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form of the backup."""
        return {
            "id": self.id,
            "session_id": self.session_id,
            "messages": [message.to_dict() for message in self.messages],
            "created_at": self.created_at.isoformat(),
            "metadata": self.metadata,
            "original_count": self.original_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContextBackup":
        """Rebuild a backup from :meth:`to_dict` output."""
        return cls(
            id=data["id"],
            session_id=data["session_id"],
            messages=[SessionMessage.from_dict(m) for m in data.get("messages") or []],
            created_at=datetime.fromisoformat(data["created_at"]),
            metadata=dict(data.get("metadata") or {}),
            original_count=int(data.get("original_count", 0)),
        )


def _default_backup_dir() -> Path:
    preferred = Path.home() / _BACKUP_DIR_NAME
    try:
        preferred.mkdir(parents=True, exist_ok=True)
        return preferred
    except OSError:
        fallback = Path(tempfile.gettempdir()) / _FALLBACK_DIR_NAME
        try:
            fallback.mkdir(parents=True, exist_ok=True)
        except OSError:
            pass
        return fallback


class ContextPreservationManager:
    """Writes session backups as JSON files and restores sessions from them."""

    def __init__(self, backup_dir: str | os.PathLike[str] | None = None) -> None:
        if backup_dir is None:
            self.backup_dir = _default_backup_dir()
        else:
            self.backup_dir = Path(backup_dir)
            self.backup_dir.mkdir(parents=True, exist_ok=True)

    def create_backup(self, session: Session) -> ContextBackup:
        """Copy the session's history and save it; a failed save is only logged."""
        messages = list(session.messages)
        backup = ContextBackup(
            id=f"backup_{session.id}_{time.time_ns()}",
            session_id=session.id,
            messages=messages,
            created_at=datetime.now(),
            metadata={
                "context": session.context,
                "working_dir": session.working_dir,
                "config": session.config,
            },
            original_count=len(messages),
        )
        try:
            self._save(backup)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("failed to save context backup to disk: %s", exc)
        return backup

    def restore_backup(self, session: Session, backup_id: str) -> None:
        """Replace the session's messages (and context) with those of a backup."""
        try:
            backup = self._load(backup_id)
        except BackupError as exc:
            raise BackupError(f"failed to load backup {backup_id}: {exc}") from exc
        if backup.session_id != session.id:
            raise BackupError(
                f"backup {backup_id} belongs to session {backup.session_id}, not {session.id}"
            )
        session.clear_messages()
        for message in backup.messages:
            session.add_message(message)
        context = backup.metadata.get("context")
        if isinstance(context, str) and context:
            session.context = context

    def list_backups(self, session_id: str) -> list[ContextBackup]:
        """All readable backups of one session; corrupted files are skipped."""
        backups = []
        for path in self._backup_files():
            try:
                backup = self._load(path.stem)
            except BackupError:
                continue
            if backup.session_id == session_id:
                backups.append(backup)
        return backups

    def cleanup_old_backups(self, max_age: timedelta | float) -> None:
        """Delete backup files last modified longer than ``max_age`` ago."""
        if not isinstance(max_age, timedelta):
            max_age = timedelta(seconds=max_age)
        cutoff = (datetime.now() - max_age).timestamp()
        for path in self._backup_files():
            try:
                modified = path.stat().st_mtime
            except OSError:
                continue
            if modified < cutoff:
                try:
                    path.unlink()
                except OSError as exc:
                    logger.warning("failed to remove old backup %s: %s", path.name, exc)

    def backup_stats(self) -> dict[str, Any]:
        """Count, total size and age range of the stored backups."""
        total = 0
        size = 0
        oldest: datetime | None = None
        newest: datetime | None = None
        for path in self._backup_files():
            try:
                info = path.stat()
            except OSError:
                continue
            total += 1
            size += info.st_size
            modified = datetime.fromtimestamp(info.st_mtime)
            oldest = modified if oldest is None else min(oldest, modified)
            newest = modified if newest is None else max(newest, modified)
        stats: dict[str, Any] = {
            "total_backups": total,
            "total_size": size,
            "backup_dir": str(self.backup_dir),
        }
        if total:
            stats["oldest_backup"] = oldest
            stats["newest_backup"] = newest
        return stats

    def _backup_files(self) -> list[Path]:
        try:
            entries = list(self.backup_dir.iterdir())
        except OSError as exc:
            raise BackupError(f"failed to read backup directory: {exc}") from exc
        return [p for p in entries if p.suffix == ".json" and not p.is_dir()]

    def _path(self, backup_id: str) -> Path:
        return self.backup_dir / f"{backup_id}.json"

    def _save(self, backup: ContextBackup) -> None:
        data = json.dumps(backup.to_dict(), indent=2, ensure_ascii=False, default=str)
        self._path(backup.id).write_text(data, encoding="utf-8")

    def _load(self, backup_id: str) -> ContextBackup:
        try:
            text = self._path(backup_id).read_text(encoding="utf-8")
        except OSError as exc:
            raise BackupError(f"failed to read backup file: {exc}") from exc
        try:
            return ContextBackup.from_dict(json.loads(text))
        except (ValueError, KeyError, TypeError) as exc:
            raise BackupError(f"failed to unmarshal backup: {exc}") from exc