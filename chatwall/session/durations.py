"""Elapsed-time bookkeeping for streamed message segments."""

import logging
from dataclasses import replace

from .models import Snapshot, duration_key

logger = logging.getLogger(__name__)


class DurationTracker:
    """Stores the last reported duration per (message id, part index).

    The tracker does not time anything itself: the renderer measures how
    long a segment streamed and reports the result here.
    """

    def record(
        self, snapshot: Snapshot, message_id: str, part_index: int, ms: int
    ) -> Snapshot:
        """Upsert a duration and return the updated Snapshot.

        Args:
            snapshot: Current snapshot
            message_id: Message owning the segment
            part_index: Index of the segment within the message
            ms: Elapsed milliseconds

        Returns:
            A new Snapshot, or ``snapshot`` itself if the key does not refer
            to an existing part

        Raises:
            ValueError: If ``ms`` is not a non-negative integer
        """
        if isinstance(ms, bool) or not isinstance(ms, int) or ms < 0:
            raise ValueError(f"Duration must be a non-negative integer, got {ms!r}")

        _, message = snapshot.find(message_id)
        if message is None or not 0 <= part_index < len(message.parts):
            logger.warning(
                "Ignoring duration for unknown segment %s",
                duration_key(message_id, part_index),
            )
            return snapshot

        durations = dict(snapshot.durations)
        durations[duration_key(message_id, part_index)] = ms
        return replace(snapshot, durations=durations)
