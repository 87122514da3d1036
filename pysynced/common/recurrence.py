# pysynced/common/recurrence.py
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo, UTC
from typing import Iterable, Optional, Union
from zoneinfo import ZoneInfo

from cronsim import CronSim, CronSimError

from .exceptions import InvalidSpecError

FieldValue = Union[None, int, Iterable[int]]

# Weekday and day-of-month combinations repeat within this many years
_CALENDAR_CYCLE_YEARS = 28


def _render_field(value: FieldValue) -> str:
    if value is None:
        return "*"
    if isinstance(value, bool):
        raise InvalidSpecError(f"Invalid recurrence field value: {value!r}")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, range) and value.step == 1 and len(value) > 1:
        return f"{value.start}-{value.stop - 1}"
    values = sorted(set(value))
    if not values:
        raise InvalidSpecError("Recurrence field cannot be an empty collection")
    return ",".join(str(v) for v in values)


def _field_values(value: FieldValue) -> set:
    if isinstance(value, int):
        return {value}
    return set(value)


@dataclass
class RecurrenceRule:
    """
    A calendar rule in the spirit of a cron line, with second precision.

    Unset fields match any value and every set field must match, so
    ``day=13, day_of_week=5`` means Friday the 13th. ``day_of_week`` uses
    cron numbering (0 or 7 is Sunday). A rule with ``recurs=False`` stands for a single
    future occurrence: the timer fires it once and stops.
    """

    minute: FieldValue = None
    hour: FieldValue = None
    day: FieldValue = None
    month: FieldValue = None
    day_of_week: FieldValue = None
    second: int = 0
    tz: Union[tzinfo, str] = UTC
    recurs: bool = True

    def __post_init__(self):
        for name in ("minute", "hour", "day", "month", "day_of_week"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, (int, range, tuple)):
                setattr(self, name, tuple(value))
        if isinstance(self.tz, str):
            self.tz = ZoneInfo(self.tz)
        if not 0 <= self.second <= 59:
            raise InvalidSpecError(f"second must be within 0-59, got {self.second}")
        try:
            CronSim(self.cron_expression, datetime.now(self.tz))
        except CronSimError as e:
            raise InvalidSpecError(f"Invalid recurrence rule: {e}") from e

    @property
    def cron_expression(self) -> str:
        return " ".join(
            _render_field(value)
            for value in (self.minute, self.hour, self.day, self.month, self.day_of_week)
        )

    def _matches_day_and_weekday(self, candidate: datetime) -> bool:
        # Cron ORs day-of-month with day-of-week; a rule requires both
        if self.day is None or self.day_of_week is None:
            return True
        weekdays = {v % 7 for v in _field_values(self.day_of_week)}
        return (
            candidate.day in _field_values(self.day)
            and candidate.isoweekday() % 7 in weekdays
        )

    def next_invocation_date(self, base: Optional[datetime] = None) -> Optional[datetime]:
        """Returns the first matching datetime strictly after ``base`` (default: now)."""
        if base is None:
            base = datetime.now(self.tz)
        elif base.tzinfo is None:
            base = base.replace(tzinfo=self.tz)
        else:
            base = base.astimezone(self.tz)

        # CronSim yields minutes strictly after its start, so begin one minute
        # early to keep the current minute's slot when ``second`` is still ahead.
        start = base.replace(second=0, microsecond=0) - timedelta(minutes=1)
        for candidate in CronSim(self.cron_expression, start):
            if candidate.year > base.year + _CALENDAR_CYCLE_YEARS:
                return None
            candidate = candidate.replace(second=self.second)
            if candidate > base and self._matches_day_and_weekday(candidate):
                return candidate
        return None
