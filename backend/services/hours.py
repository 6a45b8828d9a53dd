from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Sequence

ONE_SECOND = timedelta(seconds=1)


def pair_intervals(timestamps: Sequence[datetime]) -> list[tuple[datetime, datetime]]:
    """
    Pair punches positionally: (1st, 2nd), (3rd, 4th), ...

    A trailing punch with no partner is left out. Callers pass timestamps
    already sorted ascending, so every exit is at or after its entry.
    """
    return [(timestamps[i], timestamps[i + 1]) for i in range(0, len(timestamps) - 1, 2)]


def pair_worked_duration(timestamps: Sequence[datetime]) -> timedelta:
    total = timedelta(0)
    for entry, exit_ in pair_intervals(timestamps):
        total += exit_ - entry
    return total


def dangling_punch(timestamps: Sequence[datetime]) -> datetime | None:
    """The clock-in still waiting for its clock-out, if the count is odd."""
    if len(timestamps) % 2 == 1:
        return timestamps[-1]
    return None


@dataclass(frozen=True)
class FormattedDuration:
    display: str
    total_seconds: str


def format_duration(duration: timedelta, *, include_seconds: bool = False) -> FormattedDuration:
    whole_seconds = duration // ONE_SECOND
    hours = whole_seconds // 3600
    minutes = (whole_seconds // 60) % 60
    display = f"{hours}h {minutes}m"
    if include_seconds:
        display += f" {whole_seconds % 60}s"
    return FormattedDuration(display=display, total_seconds=str(whole_seconds))
