from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, List, Optional

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"
TIME_SLOT_FORMAT = f"{DATE_FORMAT} {TIME_FORMAT}"


@dataclass(frozen=True)
class SlotGrid:
    """
    Working day of a doctor split into fixed-duration slots.

    The grid is never stored per doctor; it is generated whenever
    availability is asked for.
    """

    start_hour: int = 8
    end_hour: int = 18
    slot_minutes: int = 30

    def __post_init__(self) -> None:
        if not 0 <= self.start_hour < self.end_hour <= 24:
            raise ValueError("Working hours must satisfy 0 <= start < end <= 24")
        if self.slot_minutes <= 0:
            raise ValueError("Slot duration must be positive")
        if self.slot_minutes > (self.end_hour - self.start_hour) * 60:
            raise ValueError("Slot duration does not fit in the working day")

    def times(self) -> Iterator[str]:
        minutes = self.start_hour * 60
        end = self.end_hour * 60
        while minutes < end:
            hour, minute = divmod(minutes, 60)
            yield f"{hour:02d}:{minute:02d}"
            minutes += self.slot_minutes

    def time_slots(self, day: str) -> List[str]:
        return [format_time_slot(day, t) for t in self.times()]

    def contains(self, time_slot: str) -> bool:
        """True iff the slot is one of the grid slots of its own day."""
        day, _, _ = time_slot.partition(" ")
        return time_slot in self.time_slots(day)

    def __len__(self) -> int:
        return sum(1 for _ in self.times())


def format_time_slot(day: str, time: str) -> str:
    return f"{day} {time}"


def today() -> str:
    return date.today().strftime(DATE_FORMAT)


def tomorrow() -> str:
    return (date.today() + timedelta(days=1)).strftime(DATE_FORMAT)


def parse_date(value: str) -> Optional[date]:
    """Parse a canonical YYYY-MM-DD string; anything else (e.g. 2030-1-1) is None."""
    try:
        parsed = datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        return None
    if parsed.strftime(DATE_FORMAT) != value:
        return None
    return parsed


def is_valid_date(value: str, reference: Optional[date] = None) -> bool:
    """A date is accepted when it parses as YYYY-MM-DD and is not in the past."""
    parsed = parse_date(value)
    if parsed is None:
        return False
    return parsed >= (reference or date.today())


def is_valid_time_slot(value: str) -> bool:
    try:
        parsed = datetime.strptime(value, TIME_SLOT_FORMAT)
    except ValueError:
        return False
    # slots are matched by exact string, so only the canonical spelling counts
    return parsed.strftime(TIME_SLOT_FORMAT) == value
