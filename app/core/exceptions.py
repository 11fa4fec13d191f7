"""
Custom exceptions for the application.
All API exceptions should inherit from APIException for consistent error handling.
"""
from typing import Optional, Any


class APIException(Exception):
    """
    Base exception for all API errors.
    Provides consistent error response format.
    """

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: Optional[Any] = None,
    ):
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details
        super().__init__(self.message)


class BadRequestException(APIException):
    """400 Bad Request"""

    def __init__(self, message: str = "Bad request", code: str = "BAD_REQUEST"):
        super().__init__(400, code, message)


class UnauthorizedException(APIException):
    """401 Unauthorized"""

    def __init__(self, message: str = "Unauthorized", code: str = "UNAUTHORIZED"):
        super().__init__(401, code, message)


class ForbiddenException(APIException):
    """403 Forbidden"""

    def __init__(
        self,
        message: str = "Forbidden",
        code: str = "FORBIDDEN",
        details: Optional[Any] = None,
    ):
        super().__init__(403, code, message, details)


class NotFoundException(APIException):
    """404 Not Found"""

    def __init__(self, message: str = "Resource not found", code: str = "NOT_FOUND"):
        super().__init__(404, code, message)


class ConflictException(APIException):
    """409 Conflict"""

    def __init__(self, message: str = "Resource conflict", code: str = "CONFLICT"):
        super().__init__(409, code, message)


class ValidationException(APIException):
    """422 Validation Error"""

    def __init__(
        self,
        message: str = "Validation error",
        code: str = "VALIDATION_ERROR",
        details: Optional[Any] = None,
    ):
        super().__init__(422, code, message, details)


class InternalServerException(APIException):
    """500 Internal Server Error"""

    def __init__(
        self,
        message: str = "Internal server error",
        code: str = "INTERNAL_ERROR",
        details: Optional[Any] = None,
    ):
        super().__init__(500, code, message, details)


class ExternalServiceException(APIException):
    """502 Bad Gateway - an upstream provider failed"""

    def __init__(
        self,
        message: str = "Upstream service failed",
        code: str = "EXTERNAL_SERVICE_ERROR",
        status_code: int = 502,
        details: Optional[Any] = None,
    ):
        super().__init__(status_code, code, message, details)


# Authentication specific exceptions
class InvalidCredentialsException(UnauthorizedException):
    """Invalid email or password"""

    def __init__(self):
        super().__init__(
            message="Invalid email or password",
            code="INVALID_CREDENTIALS",
        )


class TokenExpiredException(UnauthorizedException):
    """Token has expired"""

    def __init__(self):
        super().__init__(
            message="Token has expired",
            code="TOKEN_EXPIRED",
        )


class InvalidTokenException(UnauthorizedException):
    """Token is invalid"""

    def __init__(self):
        super().__init__(
            message="Invalid token",
            code="INVALID_TOKEN",
        )


class InvalidSignatureException(UnauthorizedException):
    """Webhook signature or cron key did not verify"""

    def __init__(self, message: str = "Invalid signature"):
        super().__init__(message=message, code="INVALID_SIGNATURE")


# Resource specific exceptions
class UserNotFoundException(NotFoundException):
    """User not found"""

    def __init__(self):
        super().__init__(message="User not found", code="USER_NOT_FOUND")


class JobNotFoundException(NotFoundException):
    """Job not found"""

    def __init__(self):
        super().__init__(message="Job not found", code="JOB_NOT_FOUND")


class CompanyNotFoundException(NotFoundException):
    """Company not found"""

    def __init__(self):
        super().__init__(message="Company not found", code="COMPANY_NOT_FOUND")


class ProfileNotFoundException(NotFoundException):
    """Onboarding profile missing"""

    def __init__(
        self,
        message: str = "User profile not found. Please complete your profile first.",
    ):
        super().__init__(message=message, code="PROFILE_NOT_FOUND")


class EmailAlreadyExistsException(ConflictException):
    """Email already registered"""

    def __init__(self):
        super().__init__(
            message="Email already registered",
            code="EMAIL_EXISTS",
        )


# Billing / application exceptions
class InsufficientCreditsException(ForbiddenException):
    """Not enough credits for the requested action"""

    def __init__(self, required_credits: int, current_credits: int):
        super().__init__(
            message="Insufficient credits",
            code="INSUFFICIENT_CREDITS",
            details={
                "required_credits": required_credits,
                "current_credits": current_credits,
            },
        )
        self.required_credits = required_credits
        self.current_credits = current_credits


class InvalidPackageException(BadRequestException):
    """Unknown credit package"""

    def __init__(self):
        super().__init__(message="Invalid package selected", code="INVALID_PACKAGE")


class PaymentVerificationException(BadRequestException):
    """Gateway reported the transaction as not successful"""

    def __init__(self, message: str = "Payment verification failed"):
        super().__init__(message=message, code="PAYMENT_NOT_VERIFIED")


class AlreadyAppliedException(BadRequestException):
    """An application for this job was already sent"""

    def __init__(self):
        super().__init__(message="Already applied to this job", code="ALREADY_APPLIED")


class NoApplicationEmailException(BadRequestException):
    """Job cannot be applied to by email"""

    def __init__(self):
        super().__init__(
            message="Job has no email application method",
            code="NO_APPLICATION_EMAIL",
        )


class OnboardingIncompleteException(BadRequestException):
    """User has not completed onboarding"""

    def __init__(self, message: str = "Please complete your profile before applying"):
        super().__init__(message=message, code="ONBOARDING_INCOMPLETE")
