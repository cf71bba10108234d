import logging
import time
from datetime import timedelta
from enum import Enum, auto
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class TimerState(Enum):
    IDLE = auto()
    RUNNING = auto()
    STOPPED = auto()


class MeetingTimer:
    """Accumulates running time across start/stop cycles.

    Elapsed time is always derived from clock deltas, never from ticks, so it
    stays accurate however rarely it is polled. ``clock`` returns seconds and
    must be monotonic; tests pass a fake one.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.state = TimerState.IDLE
        self._accumulated = 0.0
        self.running_since: Optional[float] = None

    @property
    def is_running(self) -> bool:
        return self.state is TimerState.RUNNING

    def start(self) -> None:
        if self.state is TimerState.RUNNING:
            return
        self.running_since = self._clock()
        self.state = TimerState.RUNNING
        logger.debug("Timer started at %.3f", self.running_since)

    def stop(self) -> None:
        if self.state is not TimerState.RUNNING:
            return
        self._accumulated += self._since_start()
        self.running_since = None
        self.state = TimerState.STOPPED
        logger.debug("Timer stopped, accumulated %.3fs", self._accumulated)

    def reset(self) -> None:
        self._accumulated = 0.0
        self.running_since = None
        self.state = TimerState.IDLE
        logger.debug("Timer reset")

    def elapsed(self) -> timedelta:
        seconds = self._accumulated
        if self.state is TimerState.RUNNING:
            seconds += self._since_start()
        return timedelta(seconds=seconds)

    def _since_start(self) -> float:
        # a clock that steps backwards must not shrink the total
        return max(0.0, self._clock() - self.running_since)
