"""Session controller: owns the transcript while a turn streams in."""

import asyncio
import logging
import uuid
from typing import Any, Callable, Dict, Optional, Tuple, TYPE_CHECKING

from .durations import DurationTracker
from .events import (
    Done,
    MessageFinalized,
    PartFinalized,
    TokenAppended,
    TransportError,
    TransportEvent,
)
from .models import Message, Role, Snapshot, Status, TextPart
from .persistence import PersistenceGate
from .store import (
    AppendMessage,
    AppendToPart,
    FinalizeMessage,
    PutPart,
    SnapshotError,
    apply,
)
from .welcome import WelcomeInjector

if TYPE_CHECKING:
    from ..services.recognition import Recognizer
    from ..services.transport import Transport

logger = logging.getLogger(__name__)


class SessionBusyError(RuntimeError):
    """Raised when a message is submitted while a turn is still in flight."""


class SessionController:
    """Applies user actions and transport events to the chat snapshot.

    Every accepted action or event replaces the snapshot as a whole and is
    followed by exactly one save of the combined transcript and durations,
    so storage writes happen in event order. Status is kept in memory only.

    Callbacks:
        on_change: Called with the controller after every applied change
    """

    def __init__(
        self,
        gate: PersistenceGate,
        transport: Optional["Transport"] = None,
        welcome: Optional[WelcomeInjector] = None,
        recognizer: Optional["Recognizer"] = None,
        on_change: Optional[Callable[["SessionController"], Any]] = None,
    ):
        """Initialize the controller.

        Args:
            gate: Durable storage for the snapshot
            transport: Assistant backend used by ``send``
            welcome: Greeting injector (None disables the greeting)
            recognizer: Optional dictation capability
            on_change: Change notification callback
        """
        self.gate = gate
        self.transport = transport
        self.welcome = welcome
        self.recognizer = recognizer
        self.on_change = on_change

        self._snapshot = Snapshot.empty()
        self._status = Status.IDLE
        self._hydrated = False
        self._turn = 0
        self._durations = DurationTracker()

        self.last_error: Optional[str] = None
        self.draft: Optional[str] = None
        self._dictating = False

        if self.recognizer is not None:
            self.recognizer.on_result = self._on_recognized

    # Read-only state

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def transcript(self) -> Tuple[Message, ...]:
        return self._snapshot.transcript

    @property
    def duration_map(self) -> Dict[str, int]:
        return dict(self._snapshot.durations)

    @property
    def status(self) -> Status:
        return self._status

    @property
    def hydrated(self) -> bool:
        return self._hydrated

    @property
    def is_busy(self) -> bool:
        return self._status.is_busy

    @property
    def dictating(self) -> bool:
        return self._dictating

    # Lifecycle

    def hydrate(self) -> Snapshot:
        """Load the stored snapshot, then inject the greeting if it is empty.

        Safe to call more than once; only the first call reads storage.
        """
        if self._hydrated:
            return self._snapshot

        snapshot = self.gate.load()
        self._hydrated = True
        self._status = Status.IDLE
        logger.debug("Hydrated %d messages", len(snapshot.transcript))

        if self.welcome is not None:
            greeted = self.welcome.inject(snapshot, hydrated=True)
            if greeted is not None:
                # Persist right away so a restart doesn't greet twice
                self._commit(greeted)
                return self._snapshot

        self._snapshot = snapshot
        self._notify()
        return self._snapshot

    def submit(self, text: str) -> Message:
        """Append a user message and mark the turn as submitted.

        Args:
            text: Message text

        Returns:
            The appended user message

        Raises:
            ValueError: If ``text`` is blank
            SessionBusyError: If a turn is already in flight
        """
        if not text or not text.strip():
            raise ValueError("Message cannot be empty")
        if self.is_busy:
            raise SessionBusyError("Wait for the current reply or stop it first")
        if not self._hydrated:
            self.hydrate()

        message = Message(
            id=str(uuid.uuid4()),
            role=Role.USER,
            parts=(TextPart(content=text),),
            finalized=True,
        )
        snapshot = apply(self._snapshot, AppendMessage(message))
        self._turn += 1
        self.last_error = None
        self._commit(snapshot, Status.SUBMITTED)
        return message

    async def send(self, text: str) -> None:
        """Submit ``text`` and apply the transport's reply as it streams.

        Transport exceptions become an ``error`` status; they are not raised.
        """
        if not self._hydrated:
            self.hydrate()
        history = self.transcript
        self.submit(text)
        turn = self._turn

        if self.transport is None:
            self.handle_event(TransportError("No assistant is configured"))
            return

        stream = None
        try:
            stream = self.transport.stream(text, history)
            async for event in stream:
                if turn != self._turn:
                    break
                self.handle_event(event)
                if not self.is_busy:
                    break
        except asyncio.CancelledError:
            if turn == self._turn:
                self.cancel()
            raise
        except Exception as e:
            logger.error(f"Transport failed: {e}", exc_info=True)
            if turn == self._turn:
                self.handle_event(TransportError(str(e) or type(e).__name__))
            return
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

        # A stream that ends without an explicit Done still completes the turn
        if turn == self._turn and self.is_busy:
            self.handle_event(Done())

    def handle_event(self, event: TransportEvent) -> bool:
        """Apply one transport event.

        Returns:
            True if the event changed state, False if it was dropped
        """
        if not self.is_busy:
            logger.debug("Dropping %s: no turn in flight", type(event).__name__)
            return False

        snapshot = self._snapshot
        status = self._status
        try:
            if isinstance(event, TokenAppended):
                snapshot = self._open_assistant(snapshot, event.message_id)
                snapshot = apply(
                    snapshot,
                    AppendToPart(
                        event.message_id, event.part_index, event.kind, event.delta
                    ),
                )
                status = Status.STREAMING
            elif isinstance(event, PartFinalized):
                snapshot = self._open_assistant(snapshot, event.message_id)
                snapshot = apply(
                    snapshot, PutPart(event.message_id, event.part_index, event.part)
                )
                status = Status.STREAMING
            elif isinstance(event, MessageFinalized):
                snapshot = apply(snapshot, FinalizeMessage(event.message_id))
            elif isinstance(event, TransportError):
                snapshot = self._close_in_flight(snapshot)
                self.last_error = event.message
                status = Status.ERROR
            elif isinstance(event, Done):
                snapshot = self._close_in_flight(snapshot)
                status = Status.READY
            else:
                logger.warning(f"Ignoring unknown transport event: {event!r}")
                return False
        except SnapshotError as e:
            logger.warning(f"Dropping {type(event).__name__}: {e}")
            return False

        self._commit(snapshot, status)
        return True

    def cancel(self) -> bool:
        """Stop the current turn, keeping whatever has streamed so far.

        Returns:
            True if a turn was cancelled
        """
        if not self.is_busy:
            return False

        self._turn += 1
        self._commit(self._close_in_flight(self._snapshot), Status.READY)
        self._stop_transport()
        return True

    def clear(self) -> None:
        """Forget the conversation and its durations, in memory and on disk."""
        was_busy = self.is_busy
        self._turn += 1
        self.last_error = None
        self._commit(Snapshot.empty(), Status.IDLE)
        if was_busy:
            self._stop_transport()

    def record_duration(self, message_id: str, part_index: int, ms: int) -> None:
        """Store how long a segment took to stream.

        Raises:
            ValueError: If ``ms`` is not a non-negative integer
        """
        snapshot = self._durations.record(self._snapshot, message_id, part_index, ms)
        if snapshot is not self._snapshot:
            self._commit(snapshot)

    # Dictation

    def start_dictation(self) -> bool:
        """Start the injected recognizer, if any."""
        if self.recognizer is None or self._dictating:
            return False
        self.recognizer.start()
        self._dictating = True
        self._notify()
        return True

    def stop_dictation(self) -> bool:
        """Stop the injected recognizer, if listening."""
        if self.recognizer is None or not self._dictating:
            return False
        self.recognizer.stop()
        self._dictating = False
        self._notify()
        return True

    def take_draft(self) -> Optional[str]:
        """Return and forget the latest dictated text."""
        draft, self.draft = self.draft, None
        return draft

    def _on_recognized(self, text: str) -> None:
        self.draft = text
        self._notify()

    # Internals

    def _open_assistant(self, snapshot: Snapshot, message_id: str) -> Snapshot:
        """Make sure ``message_id`` exists as the in-flight assistant message."""
        _, existing = snapshot.find(message_id)
        if existing is not None:
            return snapshot
        snapshot = self._close_in_flight(snapshot)
        return apply(
            snapshot,
            AppendMessage(Message(id=message_id, role=Role.ASSISTANT, finalized=False)),
        )

    @staticmethod
    def _close_in_flight(snapshot: Snapshot) -> Snapshot:
        last = snapshot.last_message
        if last is None or last.finalized:
            return snapshot
        return apply(snapshot, FinalizeMessage(last.id))

    def _stop_transport(self) -> None:
        if self.transport is None:
            return
        try:
            self.transport.cancel()
        except Exception as e:
            logger.warning(f"Transport did not cancel cleanly: {e}")

    def _commit(self, snapshot: Snapshot, status: Optional[Status] = None) -> None:
        self._snapshot = snapshot
        if status is not None:
            self._status = status
        self.gate.save(snapshot)
        self._notify()

    def _notify(self) -> None:
        if self.on_change is None:
            return
        try:
            self.on_change(self)
        except Exception:
            logger.exception("Change listener failed")
