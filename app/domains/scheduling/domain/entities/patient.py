"""
Patient Entity
"""

from dataclasses import dataclass

from app.core.domain import Entity


@dataclass
class Patient(Entity[str]):
    """
    Patient as seen by the scheduler.

    user_id links the record to a portal account; it is None for patients
    that are managed entirely by staff.
    """

    user_id: str | None = None
    first_name: str = ""
    last_name: str = ""
    email: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
