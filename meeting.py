import time
from datetime import timedelta
from typing import Callable, Dict, Iterable, List, Optional, Union

from models import AttendeeRoster, RosterEntry, SalaryCategory
from timer import MeetingTimer, TimerState

SECONDS_PER_HOUR = 3600.0


def total_cost(roster: AttendeeRoster, timer: MeetingTimer) -> float:
    """Cost accrued so far: combined hourly rate times elapsed hours."""
    hours = timer.elapsed().total_seconds() / SECONDS_PER_HOUR
    return roster.combined_hourly_rate() * hours


class Meeting:
    """One tracked meeting: a roster plus a timer.

    ``reset()`` only rewinds the timer. The roster is kept so the same
    attendee list can be reused for the next meeting; use
    ``clear_attendees()`` to empty it.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.roster = AttendeeRoster()
        self.timer = MeetingTimer(clock=clock)

    @classmethod
    def from_roster_records(cls, categories: Iterable[SalaryCategory], records: Iterable[Dict],
                            clock: Callable[[], float] = time.monotonic) -> "Meeting":
        meeting = cls(clock=clock)
        meeting.roster = AttendeeRoster.from_records(categories, records)
        return meeting

    # ===== Roster =====

    def add_attendee(self, category: SalaryCategory, count: int = 1) -> None:
        self.roster.add_attendees(category, count)

    def remove_attendee(self, category: Union[SalaryCategory, str], count: int = 1) -> None:
        self.roster.remove_attendees(category, count)

    def clear_attendees(self) -> None:
        self.roster.clear()

    def load_attendees(self, categories: Iterable[SalaryCategory], records: Iterable[Dict]) -> List[str]:
        """Replace the roster with records; returns category names that were skipped."""
        records = list(records)
        self.roster = AttendeeRoster.from_records(categories, records)
        return [r["category"] for r in records if r["category"] not in self.roster]

    def reprice(self, categories: Iterable[SalaryCategory]) -> List[str]:
        """Point roster entries at updated categories, dropping names no longer defined."""
        return self.load_attendees(categories, self.roster.to_records())

    def attendees(self) -> List[RosterEntry]:
        return self.roster.entries()

    def attendee_count(self, name: str) -> Optional[int]:
        return self.roster.count_for(name)

    def total_headcount(self) -> int:
        return self.roster.total_headcount()

    def combined_hourly_rate(self) -> float:
        return self.roster.combined_hourly_rate()

    # ===== Timer =====

    def start(self) -> None:
        self.timer.start()

    def stop(self) -> None:
        self.timer.stop()

    def reset(self) -> None:
        self.timer.reset()

    @property
    def state(self) -> TimerState:
        return self.timer.state

    @property
    def is_running(self) -> bool:
        return self.timer.is_running

    def elapsed(self) -> timedelta:
        return self.timer.elapsed()

    # ===== Cost =====

    def total_cost(self) -> float:
        return total_cost(self.roster, self.timer)

    def summary(self) -> Dict[str, Union[str, int, float]]:
        return {
            "state": self.state.name.lower(),
            "elapsed_seconds": self.elapsed().total_seconds(),
            "headcount": self.total_headcount(),
            "hourly_rate": self.combined_hourly_rate(),
            "total_cost": self.total_cost(),
        }
