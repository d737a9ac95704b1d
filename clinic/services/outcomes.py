"""
Outcome values returned by the service layer.

Services report expected failures (unknown records, ownership mismatches,
conflicts, store errors) as values instead of raising; the API layer maps
them to HTTP responses.
"""
from dataclasses import dataclass
from typing import Any, Optional
import enum


class BookingCheck(str, enum.Enum):
    VALID = "valid"
    SLOT_TAKEN = "slot_taken"
    DOCTOR_NOT_FOUND = "doctor_not_found"


class Outcome(str, enum.Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    OWNERSHIP_MISMATCH = "ownership_mismatch"
    SLOT_CONFLICT = "slot_conflict"
    CONFLICT = "conflict"
    INVALID_CREDENTIALS = "invalid_credentials"
    PERSISTENCE_ERROR = "persistence_error"


@dataclass
class ServiceResult:
    outcome: Outcome
    value: Any = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK

    @classmethod
    def success(cls, value: Any = None) -> "ServiceResult":
        return cls(Outcome.OK, value)

    @classmethod
    def failure(cls, outcome: Outcome, message: Optional[str] = None) -> "ServiceResult":
        return cls(outcome, None, message)
