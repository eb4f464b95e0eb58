"""
Shared domain kernel

Base types used by the scheduling and meetings bounded contexts:
identity-bearing entities and aggregates, frozen value objects, recorded
domain events and the exception hierarchy the API maps to status codes.
"""

from app.core.domain.entities import (
    AggregateRoot,
    Entity,
    generate_uuid_str,
)
from app.core.domain.events import DomainEvent
from app.core.domain.exceptions import (
    AppointmentConflictException,
    AuthorizationException,
    ConcurrencyException,
    ConflictException,
    DomainException,
    DuplicateEntityException,
    EntityNotFoundException,
    IntegrationException,
    InvalidOperationException,
    ValidationException,
)
from app.core.domain.value_objects import (
    StatusEnum,
    ValueObject,
)

__all__ = [
    # Entities
    "Entity",
    "AggregateRoot",
    "generate_uuid_str",
    # Value Objects
    "ValueObject",
    "StatusEnum",
    # Events
    "DomainEvent",
    # Exceptions
    "DomainException",
    "ValidationException",
    "EntityNotFoundException",
    "InvalidOperationException",
    "AuthorizationException",
    "ConflictException",
    "ConcurrencyException",
    "DuplicateEntityException",
    "IntegrationException",
    "AppointmentConflictException",
]
