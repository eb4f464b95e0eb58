"""
Domain event base.

Aggregates record events while they change state. Use cases pull them once
the aggregate is persisted and hand them to the realtime fan-out, which turns
each one into a channel message.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4


@dataclass(frozen=True)
class DomainEvent(ABC):
    """
    Immutable record of a state change.

    ``occurred_at`` becomes the ``timestamp`` of the outgoing message.
    Subclass fields need defaults since the base fields have them.
    """

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))
