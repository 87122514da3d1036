from .local_timer import JobHandle, LocalTimer
from .triggers import CronsimTrigger, RecurrenceTrigger

__all__ = ["CronsimTrigger", "JobHandle", "LocalTimer", "RecurrenceTrigger"]
