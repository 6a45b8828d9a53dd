import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from backend.errors import InvalidDate

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class DayWindow:
    """Half-open instant range ``[start, end)`` covering one calendar day."""

    day: date
    start: datetime
    end: datetime

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end


def load_zone(name: str) -> tzinfo:
    clean = (name or "").strip()
    if clean.upper() in {"", "UTC", "Z"}:
        return timezone.utc
    try:
        return ZoneInfo(clean)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown time zone: {clean!r}") from exc


def parse_day(value: str) -> date:
    candidate = (value or "").strip()
    if not _DATE_RE.match(candidate):
        raise InvalidDate()
    try:
        return date.fromisoformat(candidate)
    except ValueError:
        raise InvalidDate()


def resolve_day_window(value: str, zone: tzinfo = timezone.utc) -> DayWindow:
    """
    Map ``YYYY-MM-DD`` onto the instants between that day's civil midnight
    and the next one in ``zone``.

    With a fixed-offset zone such as UTC the window is exactly 24 hours. With
    a DST-observing zone it is 23 or 25 hours on transition days, since
    ``end`` is the next civil midnight rather than ``start + 24h``.
    Both bounds are returned in UTC.
    """
    day = parse_day(value)
    try:
        start_local = datetime.combine(day, time.min, tzinfo=zone)
        end_local = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone)
        return DayWindow(
            day=day,
            start=start_local.astimezone(timezone.utc),
            end=end_local.astimezone(timezone.utc),
        )
    except OverflowError:
        # first and last representable days have no full window
        raise InvalidDate("Date out of supported range.")
