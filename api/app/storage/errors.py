"""Errors raised by record store backends.

These never escape :class:`~.record_store.RecordStore`; they are logged there
and turned into default values or ``False`` results.
"""


class StorageError(Exception):
    """A backend could not complete a read or write."""


class QuotaExceededError(StorageError):
    """Writing the value would exceed the backend's size quota."""
