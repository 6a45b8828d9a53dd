import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Callable, Protocol

from backend.errors import DuplicateTimestamp, InvalidDate, InvalidInput, NotFound
from backend.models import Punch
from backend.services.day_window import DayWindow, parse_day, resolve_day_window
from backend.services.hours import (
    FormattedDuration,
    dangling_punch,
    format_duration,
    pair_worked_duration,
)

logger = logging.getLogger(__name__)


class PunchStore(Protocol):
    def insert(self, owner: int, timestamp: datetime, *, unique: bool = False) -> Punch | None: ...

    def get(self, owner: int, punch_id: int) -> Punch | None: ...

    def select_between(self, owner: int, start: datetime, end: datetime) -> list[Punch]: ...

    def update_timestamp(self, owner: int, punch_id: int, timestamp: datetime, *, unique: bool = False) -> bool: ...

    def delete(self, owner: int, punch_id: int) -> bool: ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class WorkedHours:
    window: DayWindow
    punches: list[Punch]
    duration: timedelta
    formatted: FormattedDuration
    dangling: Punch | None = None


class PunchLedger:
    """
    Per-owner punch records on top of a PunchStore.

    Every operation takes the owner explicitly and only ever touches that
    owner's rows. A punch owned by someone else is reported exactly like a
    missing one.
    """

    def __init__(
        self,
        store: PunchStore,
        *,
        zone: tzinfo = timezone.utc,
        reject_duplicates: bool = False,
        allow_client_timestamps: bool = True,
        include_seconds: bool = False,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.zone = zone
        self.reject_duplicates = reject_duplicates
        self.allow_client_timestamps = allow_client_timestamps
        self.include_seconds = include_seconds
        self.clock = clock

    def _localize(self, value: datetime) -> datetime:
        # naive input is read as wall-clock time in the reference zone
        if value.tzinfo is None:
            value = value.replace(tzinfo=self.zone)
        try:
            instant = value.astimezone(timezone.utc)
            # the instant must also be renderable back in the reference zone
            instant.astimezone(self.zone)
        except OverflowError:
            raise InvalidInput("Timestamp out of supported range.") from None
        return instant

    # -----------------------------
    # Writes
    # -----------------------------
    def register(self, owner: int, timestamp: datetime | None = None) -> Punch:
        if timestamp is not None and not self.allow_client_timestamps:
            raise InvalidInput("Client-supplied timestamps are disabled; punches use the server clock.")

        instant = self._localize(timestamp) if timestamp is not None else self._localize(self.clock())
        punch = self.store.insert(owner, instant, unique=self.reject_duplicates)
        if punch is None:
            logger.info("Duplicate punch rejected for user_id=%s at %s", owner, instant.isoformat())
            raise DuplicateTimestamp()

        logger.info("Punch %s registered for user_id=%s at %s", punch.id, owner, instant.isoformat())
        return punch

    def register_from_parts(self, owner: int, data: str | None, hora: int | None, minuto: int | None) -> Punch:
        """Register a punch from a local date plus hour and minute in the reference zone."""
        errors: list[str] = []
        day: date | None = None

        try:
            day = parse_day(data or "")
        except InvalidDate:
            errors.append("Invalid date format. Use YYYY-MM-DD.")
        if hora is None or not 0 <= hora <= 23:
            errors.append("Invalid hour. Use a value between 0 and 23.")
        if minuto is None or not 0 <= minuto <= 59:
            errors.append("Invalid minute. Use a value between 0 and 59.")

        if errors:
            raise InvalidInput("Invalid punch data.", errors=errors)

        local = datetime.combine(day, time(hora, minuto), tzinfo=self.zone)
        return self.register(owner, local)

    def update(self, owner: int, punch_id: int, new_timestamp: datetime) -> Punch:
        if self.store.get(owner, punch_id) is None:
            raise NotFound()

        instant = self._localize(new_timestamp)
        updated = self.store.update_timestamp(owner, punch_id, instant, unique=self.reject_duplicates)
        if not updated:
            if self.reject_duplicates and self.store.get(owner, punch_id) is not None:
                raise DuplicateTimestamp()
            raise NotFound()

        logger.info("Punch %s moved to %s for user_id=%s", punch_id, instant.isoformat(), owner)
        return Punch(id=punch_id, owner=owner, timestamp=instant)

    def delete(self, owner: int, punch_id: int) -> None:
        if not self.store.delete(owner, punch_id):
            raise NotFound()
        logger.info("Punch %s deleted for user_id=%s", punch_id, owner)

    # -----------------------------
    # Reads
    # -----------------------------
    def list_for_window(self, owner: int, window: DayWindow) -> list[Punch]:
        punches = self.store.select_between(owner, window.start, window.end)
        return sorted(punches, key=lambda p: (p.timestamp, p.id))

    def list_for_date(self, owner: int, day: str) -> list[Punch]:
        return self.list_for_window(owner, resolve_day_window(day, self.zone))

    def worked_for_date(self, owner: int, day: str) -> WorkedHours:
        window = resolve_day_window(day, self.zone)
        punches = self.list_for_window(owner, window)
        timestamps = [p.timestamp for p in punches]
        duration = pair_worked_duration(timestamps)
        return WorkedHours(
            window=window,
            punches=punches,
            duration=duration,
            formatted=format_duration(duration, include_seconds=self.include_seconds),
            dangling=punches[-1] if dangling_punch(timestamps) is not None else None,
        )
