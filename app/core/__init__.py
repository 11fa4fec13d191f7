"""Core module exports: settings, database session, tokens and signatures, API errors."""
from app.core.config import settings, get_settings
from app.core.database import Base, get_db, init_db, close_db, engine, async_session_maker
from app.core.security import (
    verify_password,
    hash_password,
    create_access_token,
    create_refresh_token,
    decode_token,
    verify_token_type,
    compute_hmac_signature,
    verify_hmac_signature,
    verify_cron_key,
)
from app.core.exceptions import (
    APIException,
    BadRequestException,
    UnauthorizedException,
    ForbiddenException,
    NotFoundException,
    ConflictException,
    ValidationException,
    ExternalServiceException,
    InvalidSignatureException,
    JobNotFoundException,
    ProfileNotFoundException,
    InsufficientCreditsException,
    InvalidPackageException,
    PaymentVerificationException,
    AlreadyAppliedException,
    NoApplicationEmailException,
    OnboardingIncompleteException,
)

__all__ = [
    # Config
    "settings",
    "get_settings",
    # Database
    "Base",
    "get_db",
    "init_db",
    "close_db",
    "engine",
    "async_session_maker",
    # Tokens and signatures
    "verify_password",
    "hash_password",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
    "verify_token_type",
    "compute_hmac_signature",
    "verify_hmac_signature",
    "verify_cron_key",
    # Errors
    "APIException",
    "BadRequestException",
    "UnauthorizedException",
    "ForbiddenException",
    "NotFoundException",
    "ConflictException",
    "ValidationException",
    "ExternalServiceException",
    "InvalidSignatureException",
    "JobNotFoundException",
    "ProfileNotFoundException",
    "InsufficientCreditsException",
    "InvalidPackageException",
    "PaymentVerificationException",
    "AlreadyAppliedException",
    "NoApplicationEmailException",
    "OnboardingIncompleteException",
]
