# backend/courtbook/core/exceptions.py
"""
Domain-specific exceptions for the court reservation backend.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
Conflict exceptions carry a stable ``code`` so clients can tell a lost race
("pick another slot") apart from a validation problem.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class UnauthorizedException(DomainException):
    """Raised when user is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific booking conflicts


class SlotUnavailableException(ConflictException):
    """Raised when a time range overlaps an active booking on the same court."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="SLOT_UNAVAILABLE", details=details or {})


class HoldExpiredException(ConflictException):
    """Raised when a hold passed its expiry before it could be used."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="HOLD_EXPIRED", details=details or {})


class HoldNotActiveException(ConflictException):
    """Raised when a booking is not a web hold anymore (confirmed, cancelled, other source)."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="HOLD_NOT_ACTIVE", details=details or {})


class AlreadyPaidException(ConflictException):
    """Raised when a payment would be registered twice."""

    def __init__(self, booking_id: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Booking already paid",
            code="ALREADY_PAID",
            details={"booking_id": booking_id, **(details or {})},
        )


class PaymentRequiredException(ConflictException):
    """Raised when attendance is captured before the booking is paid."""

    def __init__(self, booking_id: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Register the payment before marking attendance.",
            code="PAYMENT_REQUIRED",
            details={"booking_id": booking_id, **(details or {})},
        )


class InvalidStatusTransitionException(ConflictException):
    """Raised when the requested status change is not allowed from the current state."""

    def __init__(
        self,
        message: str,
        *,
        current_status: Optional[str] = None,
        requested_status: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            code="INVALID_STATUS_TRANSITION",
            details={
                "current_status": current_status,
                "requested_status": requested_status,
            },
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues or query failures.
    Range exclusion violations are not wrapped; they surface as
    ``IntegrityError`` so services can report them as conflicts.
    """
