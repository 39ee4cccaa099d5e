"""One-time greeting for sessions that start empty."""

import logging
import time
from typing import Callable, Optional

from .models import Message, Role, Snapshot, TextPart
from .store import AppendMessage, apply

logger = logging.getLogger(__name__)


def _welcome_id() -> str:
    return f"welcome-{int(time.time() * 1000)}"


class WelcomeInjector:
    """Adds a single finalized assistant greeting to an empty transcript.

    The injector fires at most once in its lifetime. It only decides after
    hydration: calling it against a snapshot that has not finished loading
    is refused, because an empty-looking transcript may just be one that
    has not been read yet.
    """

    def __init__(self, text: str, id_factory: Optional[Callable[[], str]] = None):
        """Initialize the injector.

        Args:
            text: Greeting content
            id_factory: Produces the message id (default ``welcome-<epoch ms>``)
        """
        self.text = text
        self._id_factory = id_factory or _welcome_id
        self._fired = False

    @property
    def fired(self) -> bool:
        return self._fired

    def inject(self, snapshot: Snapshot, hydrated: bool) -> Optional[Snapshot]:
        """Return ``snapshot`` with the greeting appended, or None if not due.

        Args:
            snapshot: The hydrated snapshot
            hydrated: Whether the initial load has completed
        """
        if self._fired:
            return None
        if not hydrated:
            logger.debug("Welcome injection skipped: hydration not complete")
            return None
        if not snapshot.is_empty:
            # A restored conversation never gets a greeting, now or later
            self._fired = True
            return None

        message = Message(
            id=self._id_factory(),
            role=Role.ASSISTANT,
            parts=(TextPart(content=self.text),),
            finalized=True,
        )
        self._fired = True
        logger.debug("Injecting welcome message %s", message.id)
        return apply(snapshot, AppendMessage(message))
