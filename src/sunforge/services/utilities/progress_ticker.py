from threading import Event, Thread
from typing import Callable, Optional

from sunforge.config.settings import settings

COMPLETE: int = 100


class ProgressTicker:
    """Emits estimated progress on a timer while an inspection is outstanding.

    The ticker knows nothing about the inspection itself. Each tick closes a
    fraction of the remaining distance to ``cap`` so the value keeps moving but
    never reaches it. ``complete`` reports 100 and stops the ticker.
    """

    def __init__(
        self,
        on_progress: Callable[[int], None],
        interval: float = settings.PROGRESS_TICK_INTERVAL,
        cap: int = settings.PROGRESS_CAP,
        step_fraction: float = 0.15,
    ) -> None:
        if not 0 < cap < COMPLETE:
            raise ValueError(f"Progress cap must be between 0 and {COMPLETE}")
        self.on_progress: Callable[[int], None] = on_progress
        self.interval: float = interval
        self.cap: int = cap
        self.step_fraction: float = step_fraction
        self.progress: float = 0

        self._stop_event: Event = Event()
        self._thread: Optional[Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = Thread(
            target=self._run, name="Inspection Progress Ticker", daemon=True
        )
        self._thread.start()

    def complete(self) -> None:
        self._stop()
        self.progress = COMPLETE
        self.on_progress(COMPLETE)

    def cancel(self) -> None:
        self._stop()

    def next_value(self) -> int:
        remaining: float = self.cap - self.progress
        self.progress = min(
            self.progress + max(remaining * self.step_fraction, 0.5), self.cap - 1
        )
        return int(self.progress)

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            self.on_progress(self.next_value())

    def _stop(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def __enter__(self) -> "ProgressTicker":
        self.start()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if exc_type is None:
            self.complete()
        else:
            self.cancel()
