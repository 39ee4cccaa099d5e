"""Speech recognition capability handed to the session controller.

Recognizers are injected rather than looked up globally so the controller
can be driven by a real engine, a test fake, or nothing at all.
"""

from typing import Callable, Optional, Protocol


class Recognizer(Protocol):
    """A dictation engine.

    ``start()`` begins listening, ``stop()`` ends it, and every recognized
    utterance is passed to the ``on_result`` callback, which the controller
    assigns before calling ``start()``.
    """

    on_result: Optional[Callable[[str], None]]

    def start(self) -> None: ...

    def stop(self) -> None: ...
