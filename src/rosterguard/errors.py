"""Exception hierarchy for rosterguard.

Violations found while validating a pattern are returned as data. These
exceptions are reserved for malformed input and invalid calls.
"""


class RosterGuardError(Exception):
    """Base class for all rosterguard errors."""


class TimeFormatError(RosterGuardError, ValueError):
    """A clock-time value could not be parsed."""


class ConfigError(RosterGuardError, ValueError):
    """Tenant schedule configuration is out of range."""


class RecordError(RosterGuardError):
    """A persisted record does not have the expected shape."""

    def __init__(self, message: str, record_id=None):
        super().__init__(message)
        self.record_id = record_id

    def __str__(self) -> str:
        base = super().__str__()
        if self.record_id is not None:
            return f"{base} (record {self.record_id})"
        return base
