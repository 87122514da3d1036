# pysynced/common/specs.py
"""
Schedule spec variants.

A raw spec handed to ``SyncedScheduler.schedule_job`` is resolved once, at
registration, into one of three variants. Each variant answers two
questions: which timer trigger drives it locally, and which occurrence a
given firing stands for.
"""
from dataclasses import dataclass
from datetime import datetime, tzinfo, UTC
from typing import Any, Optional, Protocol, Union, runtime_checkable

from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.date import DateTrigger
from cronsim import CronSim, CronSimError

from .exceptions import InvalidSpecError
from .job import Firing, to_millis
from ..timer.triggers import CronsimTrigger, RecurrenceTrigger


@runtime_checkable
class RecurrenceLike(Protocol):
    recurs: bool

    def next_invocation_date(self, base: Optional[datetime] = None) -> Optional[datetime]: ...


@dataclass(frozen=True)
class CronSpec:
    expression: str
    tz: tzinfo = UTC

    def __post_init__(self):
        try:
            CronSim(self.expression, datetime.now(self.tz))
        except CronSimError as e:
            raise InvalidSpecError(f"Invalid cron expression {self.expression!r}: {e}") from e

    def next_firing(self, now: datetime) -> Optional[Firing]:
        try:
            next_date = next(CronSim(self.expression, now.astimezone(self.tz)))
        except StopIteration:
            return None
        return Firing(next_execution=to_millis(next_date), recurring=True)

    def build_trigger(self) -> BaseTrigger:
        return CronsimTrigger(self.expression, self.tz)


@dataclass(frozen=True)
class RecurrenceSpec:
    rule: Any  # RecurrenceLike

    def next_firing(self, now: datetime) -> Optional[Firing]:
        next_date = self.rule.next_invocation_date(now)
        if next_date is None:
            return None
        next_date = next_date.replace(microsecond=0)
        return Firing(next_execution=to_millis(next_date), recurring=bool(self.rule.recurs))

    def build_trigger(self) -> BaseTrigger:
        return RecurrenceTrigger(self.rule)


@dataclass(frozen=True)
class OneOffSpec:
    at: datetime

    def next_firing(self, now: datetime) -> Optional[Firing]:
        return Firing(next_execution=to_millis(self.at), recurring=False)

    def build_trigger(self) -> BaseTrigger:
        return DateTrigger(run_date=self.at, timezone=self.at.tzinfo)


ResolvedSpec = Union[CronSpec, RecurrenceSpec, OneOffSpec]


def resolve_spec(spec: Any, tz: tzinfo = UTC) -> ResolvedSpec:
    """Maps a cron string, recurrence rule or datetime to its spec variant."""
    if isinstance(spec, (CronSpec, RecurrenceSpec, OneOffSpec)):
        return spec
    if isinstance(spec, str):
        return CronSpec(spec, tz)
    if isinstance(spec, datetime):
        if spec.tzinfo is None:
            spec = spec.replace(tzinfo=tz)
        return OneOffSpec(spec)
    if isinstance(spec, RecurrenceLike):
        return RecurrenceSpec(spec)
    raise InvalidSpecError(
        f"Unsupported schedule spec of type {type(spec).__name__}; "
        "expected a cron string, a recurrence rule or a datetime"
    )
