"""Domain error codes for the events module."""

from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    """Failure taxonomy; handlers map each kind to one HTTP status."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    PAYMENT_REQUIRED = "payment_required"
    REFUND_FAILED = "refund_failed"


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_INPUT = ("INVALID_INPUT", ErrorKind.VALIDATION)
    INVALID_EVENT_ID = ("INVALID_EVENT_ID", ErrorKind.VALIDATION)
    INVALID_HALL_ID = ("INVALID_HALL_ID", ErrorKind.VALIDATION)
    REGISTRATION_CLOSED = ("REGISTRATION_CLOSED", ErrorKind.VALIDATION)
    EVENT_NOT_APPROVED = ("EVENT_NOT_APPROVED", ErrorKind.VALIDATION)
    PAYMENT_NOT_COMPLETED = ("PAYMENT_NOT_COMPLETED", ErrorKind.VALIDATION)
    EVENT_NOT_FOUND = ("EVENT_NOT_FOUND", ErrorKind.NOT_FOUND)
    HALL_NOT_FOUND = ("HALL_NOT_FOUND", ErrorKind.NOT_FOUND)
    PAYMENT_NOT_FOUND = ("PAYMENT_NOT_FOUND", ErrorKind.NOT_FOUND)
    REGISTRATION_NOT_FOUND = ("REGISTRATION_NOT_FOUND", ErrorKind.NOT_FOUND)
    FORBIDDEN = ("FORBIDDEN", ErrorKind.FORBIDDEN)
    HALL_CONFLICT = ("HALL_CONFLICT", ErrorKind.CONFLICT)
    HALL_IN_USE = ("HALL_IN_USE", ErrorKind.CONFLICT)
    DUPLICATE_REGISTRATION = ("DUPLICATE_REGISTRATION", ErrorKind.CONFLICT)
    ALREADY_IN_STATE = ("ALREADY_IN_STATE", ErrorKind.CONFLICT)
    ALREADY_REFUNDED = ("ALREADY_REFUNDED", ErrorKind.CONFLICT)
    CAPACITY_EXCEEDED = ("CAPACITY_EXCEEDED", ErrorKind.CAPACITY_EXCEEDED)
    PAYMENT_REQUIRED = ("PAYMENT_REQUIRED", ErrorKind.PAYMENT_REQUIRED)
    REFUND_FAILED = ("REFUND_FAILED", ErrorKind.REFUND_FAILED)

    def __init__(self, label: str, kind: ErrorKind) -> None:
        self.label = label
        self.kind = kind


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    @property
    def kind(self) -> ErrorKind:
        return self.code.kind

    def __str__(self) -> str:
        return f"{self.code.label}: {self.message}"


class ValidationError(DomainError):
    """Raised when caller input is malformed or violates a domain rule."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INVALID_INPUT) -> None:
        super().__init__(code=code, message=message)


class InvalidEventIdError(ValidationError):
    """Raised when an event ID is invalid."""

    def __init__(self) -> None:
        super().__init__("Invalid event ID format", ErrorCode.INVALID_EVENT_ID)


class InvalidHallIdError(ValidationError):
    """Raised when a hall ID is invalid."""

    def __init__(self) -> None:
        super().__init__("Invalid hall ID format", ErrorCode.INVALID_HALL_ID)


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class HallNotFoundError(DomainError):
    """Raised when a hall is not found."""

    def __init__(self, hall_id: str) -> None:
        super().__init__(
            code=ErrorCode.HALL_NOT_FOUND,
            message="Hall not found",
        )
        self.hall_id = hall_id


class PaymentNotFoundError(DomainError):
    def __init__(self, message: str = "Payment not found") -> None:
        super().__init__(code=ErrorCode.PAYMENT_NOT_FOUND, message=message)


class RegistrationNotFoundError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_NOT_FOUND,
            message="You are not registered for this event",
        )


class ForbiddenError(DomainError):
    """Raised when the caller's role or ownership does not allow the operation."""

    def __init__(self, message: str = "Not authorized") -> None:
        super().__init__(code=ErrorCode.FORBIDDEN, message=message)


class HallConflictError(DomainError):
    """Raised when a requested window overlaps a live reservation on the hall."""

    def __init__(self, hall_id: str) -> None:
        super().__init__(
            code=ErrorCode.HALL_CONFLICT,
            message="Hall is already reserved for the requested time range",
        )
        self.hall_id = hall_id


class HallInUseError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.HALL_IN_USE, message=message)


class DuplicateRegistrationError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_REGISTRATION,
            message="User already registered for this event",
        )


class AlreadyInStateError(DomainError):
    """Raised when a transition targets the state the event is already in."""

    def __init__(self, status: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_IN_STATE,
            message=f"Event is already {status}",
        )
        self.status = status


class AlreadyRefundedError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_REFUNDED,
            message="This payment has already been refunded",
        )


class CapacityExceededError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.CAPACITY_EXCEEDED, message=message)


class PaymentRequiredError(DomainError):
    """Raised when the processor could not open a checkout."""

    def __init__(self, message: str = "Payment could not be started") -> None:
        super().__init__(code=ErrorCode.PAYMENT_REQUIRED, message=message)


class RefundFailedError(DomainError):
    """Raised when a refund could not be issued. Safe to retry."""

    def __init__(self, message: str = "Refund failed") -> None:
        super().__init__(code=ErrorCode.REFUND_FAILED, message=message)
