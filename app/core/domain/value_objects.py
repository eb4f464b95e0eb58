"""
Value object bases.

Concrete value objects live with their bounded context (time windows,
appointment details, room settings). They are frozen dataclasses and check
their own invariants on construction.
"""

from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Self


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Frozen, identity-less domain value.

    Subclasses override ``_validate`` and raise ValidationException when the
    fields do not describe a legal value, so an invalid instance never exists.
    """

    def __post_init__(self):
        self._validate()

    def _validate(self) -> None:
        pass


class StatusEnum(str, Enum):
    """String enum that accepts any letter case when parsed from a request."""

    @classmethod
    def from_string(cls, value: str) -> Self:
        wanted = value.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        raise ValueError(f"Invalid {cls.__name__}: {value}")
