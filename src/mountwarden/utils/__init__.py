"""Utility modules for logging, errors and the run log."""

from mountwarden.utils.errors import (
    ErrorCategory,
    ErrorSeverity,
    ErrorContext,
    MountError,
    ConfigurationError,
    CredentialError,
    ConflictError,
    PlatformError,
    VerificationError,
    ErrorHandler,
    error_handler
)
from mountwarden.utils.logging import get_logger, setup_logging, prune_logs

__all__ = [
    # Errors
    'ErrorCategory',
    'ErrorSeverity',
    'ErrorContext',
    'MountError',
    'ConfigurationError',
    'CredentialError',
    'ConflictError',
    'PlatformError',
    'VerificationError',
    'ErrorHandler',
    'error_handler',

    # Logging
    'get_logger',
    'setup_logging',
    'prune_logs',
]
