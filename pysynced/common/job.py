# pysynced/common/job.py
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable


@dataclass(frozen=True)
class Job:
    """
    A named action registered with a schedule spec.

    The name doubles as the watermark key and, suffixed with ``Lock``,
    as the distributed lock name.
    """

    name: str
    spec: Any  # one of CronSpec, RecurrenceSpec, OneOffSpec
    action: Callable[[], Any]


@dataclass(frozen=True)
class Firing:
    """One local timer invocation, resolved to the occurrence it stands for."""

    next_execution: int  # milliseconds since the epoch
    recurring: bool


def lock_name_for(job_name: str) -> str:
    return f"{job_name}Lock"


def to_millis(dt: datetime) -> int:
    whole_seconds = int(dt.replace(microsecond=0).timestamp())
    return whole_seconds * 1000 + dt.microsecond // 1000
