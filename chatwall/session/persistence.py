"""Durable storage slot for the chat snapshot."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import Message, Snapshot

logger = logging.getLogger(__name__)


class PersistenceGate:
    """Loads and saves a Snapshot to a single JSON file.

    The file holds ``{"messages": [...], "durations": {...}}``. Loading never
    raises: a missing, unreadable or malformed file yields an empty Snapshot,
    and malformed entries inside an otherwise valid file are skipped. Saving
    is best-effort: failures are logged and reported through the return
    value, never raised.
    """

    def __init__(self, path: Path):
        """Initialize the gate.

        Args:
            path: File backing the slot (created on first save)
        """
        self.path = Path(path)

    @classmethod
    def for_key(cls, storage_key: str) -> "PersistenceGate":
        """Create a gate for a storage key under the sessions directory."""
        from chatwall.core.config_paths import ConfigPaths

        return cls(ConfigPaths.get_session_file(storage_key))

    def load(self) -> Snapshot:
        """Read the slot, substituting an empty Snapshot for bad data."""
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No stored chat at %s", self.path)
            return Snapshot.empty()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read chat storage {self.path}: {e}")
            return Snapshot.empty()

        if not content.strip():
            return Snapshot.empty()

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning(f"Stored chat is not valid JSON ({e}); starting empty")
            return Snapshot.empty()

        if not isinstance(data, dict):
            logger.warning("Stored chat is not a JSON object; starting empty")
            return Snapshot.empty()

        return snapshot_from_dict(data)

    def save(self, snapshot: Snapshot) -> bool:
        """Write the whole snapshot to the slot.

        Args:
            snapshot: Transcript and durations to persist together

        Returns:
            True if the write succeeded
        """
        try:
            payload = json.dumps(snapshot.to_dict(), ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error(f"Chat snapshot is not serializable: {e}")
            return False

        tmp_name: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
            tmp_name = None
            return True
        except OSError as e:
            logger.error(f"Failed to save chat storage {self.path}: {e}")
            return False
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.debug("Could not remove temp file %s", tmp_name)

    def clear(self) -> bool:
        """Overwrite the slot with an empty Snapshot."""
        return self.save(Snapshot.empty())


def snapshot_from_dict(data: Dict[str, Any]) -> Snapshot:
    """Build a Snapshot from stored JSON, dropping entries that don't parse."""
    return Snapshot(
        transcript=tuple(_parse_messages(data.get("messages"))),
        durations=_parse_durations(data.get("durations")),
    )


def _parse_messages(raw: Any) -> List[Message]:
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning("Stored messages are not a list; ignoring them")
        return []

    messages: List[Message] = []
    seen = set()
    for position, item in enumerate(raw):
        try:
            message = Message.from_dict(item)
        except (ValueError, TypeError) as e:
            logger.warning(f"Skipping stored message #{position}: {e}")
            continue
        if message.id in seen:
            logger.warning(f"Skipping duplicate stored message id {message.id}")
            continue
        seen.add(message.id)
        messages.append(message)
    return messages


def _parse_durations(raw: Any) -> Dict[str, int]:
    if not isinstance(raw, dict):
        if raw is not None:
            logger.warning("Stored durations are not an object; ignoring them")
        return {}

    durations: Dict[str, int] = {}
    for key, value in raw.items():
        # bool is an int subclass but never a duration
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            logger.debug("Skipping stored duration %r=%r", key, value)
            continue
        durations[str(key)] = value
    return durations
