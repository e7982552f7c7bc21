from threading import Event
from typing import List

import pytest

from sunforge.services.utilities.progress_ticker import COMPLETE, ProgressTicker


class ProgressRecorder:
    def __init__(self, wait_for: int = 0) -> None:
        self.values: List[int] = []
        self.wait_for: int = wait_for
        self.received: Event = Event()

    def __call__(self, progress: int) -> None:
        self.values.append(progress)
        if len(self.values) >= self.wait_for:
            self.received.set()


def test_progress_approaches_but_never_reaches_cap():
    ticker = ProgressTicker(on_progress=lambda progress: None, interval=1, cap=95)

    values = [ticker.next_value() for _ in range(500)]

    assert values == sorted(values)
    assert values[0] > 0
    assert max(values) < 95


def test_complete_reports_full_progress():
    recorder = ProgressRecorder()
    ticker = ProgressTicker(on_progress=recorder, interval=1)

    ticker.complete()

    assert recorder.values == [COMPLETE]


def test_ticker_reports_progress_while_running():
    recorder = ProgressRecorder(wait_for=3)
    ticker = ProgressTicker(on_progress=recorder, interval=0.01)

    ticker.start()
    assert recorder.received.wait(timeout=5)
    ticker.complete()

    assert recorder.values[-1] == COMPLETE
    assert all(value < 95 for value in recorder.values[:-1])
    assert recorder.values[:-1] == sorted(recorder.values[:-1])


def test_context_manager_completes_on_success():
    recorder = ProgressRecorder()

    with ProgressTicker(on_progress=recorder, interval=10):
        pass

    assert recorder.values == [COMPLETE]


def test_context_manager_cancels_on_failure():
    recorder = ProgressRecorder()

    with pytest.raises(RuntimeError):
        with ProgressTicker(on_progress=recorder, interval=10):
            raise RuntimeError("inspection failed")

    assert COMPLETE not in recorder.values


@pytest.mark.parametrize("cap", [0, 100, 120])
def test_invalid_cap_is_rejected(cap):
    with pytest.raises(ValueError):
        ProgressTicker(on_progress=lambda progress: None, cap=cap)
