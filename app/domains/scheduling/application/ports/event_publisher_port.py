"""
Appointment Event Publisher Port
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from app.core.domain import DomainEvent


@runtime_checkable
class IAppointmentEventPublisher(Protocol):
    async def publish(self, events: Sequence[DomainEvent]) -> None:
        """
        Fan appointment events out to the affected users' channels.

        Delivery is at-most-once; subscribers re-fetch state after reconnecting.
        """
        ...
