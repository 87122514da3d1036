# pysynced/execution/performer.py
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


def perform_action(job_name: str, action: Callable[[], Any]) -> bool:
    """Runs a claimed occurrence. Failures are logged and not retried."""
    try:
        action()
    except Exception:
        logger.error(f"Job {job_name} action failed.", exc_info=True)
        return False
    return True
