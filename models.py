import logging
import numbers
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Union

logger = logging.getLogger(__name__)

# 52 weeks x 40 hours
WORK_HOURS_PER_YEAR = 2080


class ValidationError(ValueError):
    """Base class for rejected category or roster input."""
    kind = "Validation"


class EmptyNameError(ValidationError):
    kind = "EmptyName"

    def __init__(self):
        super().__init__("Category name must not be empty")


class NegativeSalaryError(ValidationError):
    kind = "NegativeSalary"

    def __init__(self, salary):
        super().__init__(f"Annual salary must be zero or greater (got {salary!r})")
        self.salary = salary


class ZeroCountError(ValidationError):
    kind = "ZeroCount"

    def __init__(self, count):
        super().__init__(f"Attendee count must be at least 1 (got {count!r})")
        self.count = count


@dataclass(frozen=True)
class SalaryCategory:
    name: str
    annual_salary: float

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise EmptyNameError()
        salary = self.annual_salary
        if isinstance(salary, bool) or not isinstance(salary, numbers.Real):
            raise NegativeSalaryError(salary)
        try:
            salary = float(salary)
        except OverflowError:
            raise NegativeSalaryError(self.annual_salary) from None
        # NaN fails this comparison too
        if not 0 <= salary < float("inf"):
            raise NegativeSalaryError(self.annual_salary)
        object.__setattr__(self, "name", self.name.strip())
        object.__setattr__(self, "annual_salary", salary)

    @classmethod
    def create(cls, name, annual_salary) -> "SalaryCategory":
        """Build a category from loose input (e.g. "120000" from a file or form).

        Raises EmptyNameError or NegativeSalaryError.
        """
        if name is None:
            raise EmptyNameError()
        if isinstance(annual_salary, bool):
            raise NegativeSalaryError(annual_salary)
        try:
            salary = float(annual_salary)
        except (TypeError, ValueError, OverflowError):
            raise NegativeSalaryError(annual_salary) from None
        return cls(name=str(name), annual_salary=salary)

    def hourly_rate(self) -> float:
        return self.annual_salary / WORK_HOURS_PER_YEAR

    def to_dict(self) -> Dict[str, float]:
        return {"name": self.name, "annual_salary": self.annual_salary}


@dataclass
class RosterEntry:
    category: SalaryCategory
    count: int

    @property
    def hourly_rate(self) -> float:
        return self.count * self.category.hourly_rate()


class AttendeeRoster:
    """Attendees grouped by category name, kept in first-add order.

    An entry keeps the category it was first added with; adding attendees
    under a category of the same name only bumps the count.
    """

    def __init__(self):
        self._entries: Dict[str, RosterEntry] = {}

    @classmethod
    def from_records(cls, categories: Iterable[SalaryCategory], records: Iterable[Dict]) -> "AttendeeRoster":
        """Build a roster from {category, count} records, skipping unknown category names."""
        by_name = {c.name: c for c in categories}
        roster = cls()
        for record in records:
            category = by_name.get(record["category"])
            if category is None:
                logger.warning("Skipping attendees for unknown category %r", record["category"])
                continue
            roster.add_attendees(category, record["count"])
        return roster

    def add_attendees(self, category: SalaryCategory, count: int = 1) -> None:
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise ZeroCountError(count)
        entry = self._entries.get(category.name)
        if entry is None:
            self._entries[category.name] = RosterEntry(category=category, count=count)
        else:
            entry.count += count

    def remove_attendees(self, category: Union[SalaryCategory, str], count: int = 1) -> None:
        name = category.name if isinstance(category, SalaryCategory) else category
        entry = self._entries.get(name)
        if entry is None or count < 1:
            return
        if entry.count <= count:
            del self._entries[name]
        else:
            entry.count -= count

    def count_for(self, name: str) -> Optional[int]:
        entry = self._entries.get(name)
        return entry.count if entry else None

    def entries(self) -> List[RosterEntry]:
        return [RosterEntry(category=e.category, count=e.count) for e in self._entries.values()]

    def clear(self) -> None:
        self._entries.clear()

    def total_headcount(self) -> int:
        return sum(e.count for e in self._entries.values())

    def combined_hourly_rate(self) -> float:
        return sum((e.hourly_rate for e in self._entries.values()), 0.0)

    def to_records(self) -> List[Dict[str, Union[str, int]]]:
        return [{"category": e.category.name, "count": e.count} for e in self._entries.values()]

    def __iter__(self) -> Iterator[RosterEntry]:
        return iter(self.entries())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name) -> bool:
        if isinstance(name, SalaryCategory):
            name = name.name
        return name in self._entries
