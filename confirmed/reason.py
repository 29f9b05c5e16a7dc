from __future__ import annotations
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import ValidationError


class Reason(str, Enum):
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    def __str__(self):
        return self.value


CONFIRMED = Reason.CONFIRMED
REJECTED = Reason.REJECTED
CANCELLED = Reason.CANCELLED


@dataclass(frozen=True)
class Outcome:
    """The record a confirmer settles to on its success path."""
    reason: Reason
    value: Any = None

    @staticmethod
    def coerce(record: Any) -> Outcome:
        """Read an outcome record from an `Outcome`, a mapping with a `reason`
        key, or any object carrying `reason` and `value` attributes. Raises
        `ValidationError` unless the reason is one of the three known ones."""
        match record:
            case Outcome(reason=Reason()):
                return record
            case Mapping() if "reason" in record:
                reason, value = record["reason"], record.get("value")
            case _ if hasattr(record, "reason"):
                reason, value = record.reason, getattr(record, "value", None)
            case _:
                raise ValidationError(record)

        try:
            return Outcome(Reason(reason), value)
        except (ValueError, TypeError) as e:
            raise ValidationError(record) from e
