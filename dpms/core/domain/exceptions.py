"""
Domain Exceptions for Domain-Driven Design

These exceptions represent business rule violations and domain-specific errors.
They are caught and translated to HTTP responses in the API layer.
"""

from typing import Any


class DomainException(Exception):
    """
    Base exception for all domain-related errors.

    Provides a standardized way to communicate business rule violations.
    """

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "ALREADY_ISSUED")
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(DomainException):
    """
    Raised when domain validation fails.

    Use for malformed timing sets, missing medicine references,
    empty medication lists, etc.
    """

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field


class EntityNotFoundException(DomainException):
    """
    Raised when an entity is not found.
    """

    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        message: str | None = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        msg = message or f"{entity_type} with ID {entity_id} not found"
        super().__init__(
            msg,
            "ENTITY_NOT_FOUND",
            {"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class PayloadAlreadyIssuedException(DomainException):
    """Raised when a scannable payload is requested twice for one prescription."""

    def __init__(self, prescription_id: Any):
        self.prescription_id = prescription_id
        super().__init__(
            f"Scannable payload already issued for prescription {prescription_id}",
            "ALREADY_ISSUED",
            {"prescription_id": str(prescription_id)},
        )


class NoContactAddressException(DomainException):
    """Raised when a patient cannot be reached by e-mail."""

    def __init__(self, prescription_id: Any, patient_id: Any | None = None):
        self.prescription_id = prescription_id
        self.patient_id = patient_id
        super().__init__(
            f"Patient of prescription {prescription_id} has no e-mail address",
            "NO_CONTACT_ADDRESS",
            {"prescription_id": str(prescription_id), "patient_id": str(patient_id)},
        )


class NoMatchingLinesException(DomainException):
    """Raised when a prescription has no medication scheduled for a timing slot."""

    def __init__(self, prescription_id: Any, timing: str):
        self.prescription_id = prescription_id
        self.timing = timing
        super().__init__(
            f"No medications scheduled for timing: {timing}",
            "NO_MATCHING_LINES",
            {"prescription_id": str(prescription_id), "timing": timing},
        )


class AuthorizationException(DomainException):
    """Raised when a viewer role is not allowed to perform an operation."""

    def __init__(self, operation: str, role: str | None = None):
        self.operation = operation
        self.role = role
        msg = f"Not authorized to perform '{operation}'"
        if role:
            msg += f" as '{role}'"
        super().__init__(msg, "AUTHORIZATION_ERROR", {"operation": operation, "role": role})


class ChannelException(DomainException):
    """
    Base class for delivery channel failures.

    Carries the classified failure kind and an operator-facing hint.
    """

    default_code = "CHANNEL_ERROR"

    def __init__(self, message: str, hint: str | None = None, smtp_code: int | None = None):
        self.hint = hint
        self.smtp_code = smtp_code
        details: dict[str, Any] = {}
        if hint:
            details["hint"] = hint
        if smtp_code is not None:
            details["smtp_code"] = smtp_code
        super().__init__(message, self.default_code, details)


class ChannelNotConfiguredException(ChannelException):
    """SMTP credentials are missing."""

    default_code = "CHANNEL_NOT_CONFIGURED"


class ChannelAuthFailureException(ChannelException):
    """The relay rejected the login."""

    default_code = "CHANNEL_AUTH_FAILURE"


class ChannelConnectionFailureException(ChannelException):
    """The relay could not be reached or dropped the session."""

    default_code = "CHANNEL_CONNECTION_FAILURE"


class ChannelTimeoutException(ChannelException):
    """The relay did not answer in time."""

    default_code = "CHANNEL_TIMEOUT"


class ChannelRejectedException(ChannelException):
    """The relay refused the message."""

    default_code = "CHANNEL_REJECTED"


class ChannelInvalidAddressException(ChannelRejectedException):
    """The destination address is malformed or was refused."""

    default_code = "CHANNEL_INVALID_ADDRESS"
