"""
Domain Exceptions

Errors raised by entities, domain services and use cases. The API layer maps
each family to one HTTP status (see app.api.exception_handlers):

- ValidationException -> 400
- EntityNotFoundException -> 404
- AuthorizationException -> 403
- ConflictException and its subclasses -> 409
- IntegrationException -> 502
"""

from typing import Any


class DomainException(Exception):
    """
    Base exception for all domain-related errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code (e.g., "APPOINTMENT_CONFLICT")
        details: Additional context returned to the client
    """

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(DomainException):
    """Missing or malformed input, or a value object that cannot be built."""

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field


class EntityNotFoundException(DomainException):
    """A referenced doctor, patient, organization, appointment or room does not exist."""

    def __init__(self, entity_type: str, entity_id: Any, message: str | None = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            message or f"{entity_type} with ID {entity_id} not found",
            "ENTITY_NOT_FOUND",
            {"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class AuthorizationException(DomainException):
    """
    The caller is authenticated but does not own the resource.

    Ownership is the only rule here: creator for appointments, host for rooms.
    """

    def __init__(self, operation: str, resource: str | None = None, user_id: str | None = None):
        self.operation = operation
        self.resource = resource
        self.user_id = user_id
        msg = f"Not authorized to perform '{operation}'"
        if resource:
            msg += f" on '{resource}'"
        super().__init__(msg, "AUTHORIZATION_ERROR", {"operation": operation, "resource": resource})


class ConflictException(DomainException):
    """Base for requests that clash with the current state of the system."""


class AppointmentConflictException(ConflictException):
    """The doctor already has a live appointment overlapping the requested window."""

    def __init__(
        self,
        doctor_id: str | None = None,
        time_slot: str | None = None,
        conflicting_ids: list[str] | None = None,
        message: str | None = None,
    ):
        self.doctor_id = doctor_id
        self.time_slot = time_slot
        self.conflicting_ids = conflicting_ids or []
        details: dict[str, Any] = {}
        if doctor_id:
            details["doctor_id"] = doctor_id
        if time_slot:
            details["time_slot"] = time_slot
        if self.conflicting_ids:
            details["conflicting_appointment_ids"] = self.conflicting_ids
        super().__init__(
            message or "Doctor has a conflicting appointment at this time",
            "APPOINTMENT_CONFLICT",
            details,
        )


class DuplicateEntityException(ConflictException):
    """A unique value (room id, access code) is already taken."""

    def __init__(self, entity_type: str, field: str, value: Any):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        super().__init__(
            f"{entity_type} with {field}='{value}' already exists",
            "DUPLICATE_ENTITY",
            {"entity_type": entity_type, "field": field},
        )


class InvalidOperationException(ConflictException):
    """
    The operation is not allowed in the aggregate's current state.

    Examples: changing a cancelled appointment, joining an ended room,
    ending a room that never started.
    """

    def __init__(self, operation: str, current_state: str, message: str | None = None):
        self.operation = operation
        self.current_state = current_state
        super().__init__(
            message or f"Cannot perform '{operation}' in state '{current_state}'",
            "INVALID_OPERATION",
            {"operation": operation, "current_state": current_state},
        )


class ConcurrencyException(ConflictException):
    """
    The row changed between read and write.

    Raised when a version-guarded write matches no row. The caller reloads
    and decides again, or the client retries the request.
    """

    def __init__(self, entity_type: str, entity_id: Any, expected_version: int):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_version = expected_version
        super().__init__(
            f"{entity_type} {entity_id} was modified concurrently; reload and retry",
            "CONCURRENCY_CONFLICT",
            {"entity_type": entity_type, "entity_id": str(entity_id), "expected_version": expected_version},
        )


class IntegrationException(DomainException):
    """An outbound collaborator (SMTP, calendar API, realtime broker) failed."""

    def __init__(self, service: str, message: str, original_error: Exception | None = None):
        self.service = service
        self.original_error = original_error
        super().__init__(message, "INTEGRATION_ERROR", {"service": service})
