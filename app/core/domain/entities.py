"""
Entity and aggregate bases for the scheduling and meetings contexts.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Generic, TypeVar
from uuid import uuid4

from app.core.domain.events import DomainEvent

TId = TypeVar("TId")


@dataclass
class Entity(ABC, Generic[TId]):
    """
    Object with an identity that survives changes to its attributes.

    Two entities are equal only when both carry the same id; an entity
    without an id equals nothing but itself.
    """

    id: TId | None = field(default=None)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity) or self.id is None or other.id is None:
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id) if self.id is not None else id(self)

    def touch(self, now: datetime | None = None) -> None:
        self.updated_at = now or datetime.now(UTC)


@dataclass
class AggregateRoot(Entity[TId], Generic[TId]):
    """
    Consistency boundary that records what happened to it.

    Mutating methods call ``_record_event``. The use case saves the aggregate
    first and then calls ``pull_domain_events`` so nothing is broadcast for a
    change that failed to persist. ``version`` is bumped on every accepted
    mutation and stored with the row.
    """

    _domain_events: list[DomainEvent] = field(default_factory=list, repr=False, compare=False)
    version: int = field(default=0)

    def _record_event(self, event: DomainEvent) -> None:
        self._domain_events.append(event)

    def get_domain_events(self) -> list[DomainEvent]:
        return list(self._domain_events)

    def pull_domain_events(self) -> list[DomainEvent]:
        events, self._domain_events = self._domain_events, []
        return events

    def clear_domain_events(self) -> None:
        self._domain_events.clear()

    def increment_version(self) -> None:
        self.version += 1


def generate_uuid_str() -> str:
    return str(uuid4())
