# pysynced/timer/triggers.py
from datetime import datetime, tzinfo, UTC
from typing import Optional

from apscheduler.triggers.base import BaseTrigger
from cronsim import CronSim


class CronsimTrigger(BaseTrigger):
    """APScheduler trigger that follows a standard five-field cron line.

    Uses the same parser as the firing adapter, so the timer and the dedup
    watermark never disagree on what the next occurrence is.
    """

    def __init__(self, expression: str, tz: tzinfo = UTC):
        self.expression = expression
        self.tz = tz

    def get_next_fire_time(
        self, previous_fire_time: Optional[datetime], now: datetime
    ) -> Optional[datetime]:
        start = (previous_fire_time or now).astimezone(self.tz)
        try:
            return next(CronSim(self.expression, start))
        except StopIteration:
            return None

    def __str__(self):
        return f"cron[{self.expression}]"

    def __repr__(self):
        return f"<CronsimTrigger (expression={self.expression!r}, tz={self.tz})>"


class RecurrenceTrigger(BaseTrigger):
    def __init__(self, rule):
        self.rule = rule

    def get_next_fire_time(
        self, previous_fire_time: Optional[datetime], now: datetime
    ) -> Optional[datetime]:
        if previous_fire_time is not None and not self.rule.recurs:
            return None
        return self.rule.next_invocation_date(previous_fire_time or now)

    def __str__(self):
        return f"recurrence[{self.rule}]"
