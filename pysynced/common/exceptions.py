# pysynced/common/exceptions.py


class PySyncedException(Exception):
    """Base exception for the pysynced library."""

    pass


class InvalidSpecError(PySyncedException):
    """Raised when a schedule spec cannot be turned into a firing source."""

    pass


class LockAcquisitionError(PySyncedException):
    """Raised when a distributed lock could not be acquired within its timeout."""

    pass
