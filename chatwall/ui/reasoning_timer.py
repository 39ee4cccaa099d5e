"""Measures how long reasoning segments stream."""

import time
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..session.models import Message, PartKind, Status

SegmentKey = Tuple[str, int]


def streaming_segment(
    transcript: Sequence[Message], status: Status
) -> Optional[SegmentKey]:
    """Return the (message id, part index) currently streaming, if any.

    Only the last part of the last message can be streaming, and only while
    the controller is in the ``streaming`` state.
    """
    if status is not Status.STREAMING or not transcript:
        return None
    last = transcript[-1]
    if not last.parts:
        return None
    return last.id, len(last.parts) - 1


class ReasoningTimer:
    """Times reasoning parts from first sight until they stop streaming.

    Call ``observe`` after every controller change; it returns the segments
    that just finished as ``(message_id, part_index, elapsed_ms)``.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._started: Dict[SegmentKey, float] = {}

    @property
    def active(self) -> List[SegmentKey]:
        return list(self._started)

    def observe(
        self, transcript: Sequence[Message], status: Status
    ) -> List[Tuple[str, int, int]]:
        now = self._clock()
        current = streaming_segment(transcript, status)

        if current is not None and current not in self._started:
            message = transcript[-1]
            if message.parts[current[1]].kind is PartKind.REASONING:
                self._started[current] = now

        finished = []
        for key, started_at in list(self._started.items()):
            if key == current:
                continue
            del self._started[key]
            elapsed_ms = max(0, int(round((now - started_at) * 1000)))
            finished.append((key[0], key[1], elapsed_ms))
        return finished

    def reset(self) -> None:
        """Forget all running timers (e.g. after the chat is cleared)."""
        self._started.clear()
