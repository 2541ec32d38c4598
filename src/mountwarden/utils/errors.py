"""Error handling framework for mount reconciliation."""

import subprocess
from typing import Optional, Dict, Any, List
from enum import Enum
from dataclasses import dataclass
from botocore.exceptions import ClientError, NoCredentialsError, PartialCredentialsError
from mountwarden.utils.logging import get_logger

logger = get_logger(__name__)


class ErrorCategory(Enum):
    """Categories of errors that can occur during reconciliation."""
    CONFIGURATION = "configuration"
    CREDENTIAL = "credential"
    CONFLICT = "conflict"
    PLATFORM = "platform"
    VERIFICATION = "verification"
    AWS = "aws"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    CRITICAL = "critical"  # Run cannot continue
    ERROR = "error"  # Mount failed but the run continues
    WARNING = "warning"  # Non-fatal issue
    INFO = "info"  # Informational message


@dataclass
class ErrorContext:
    """Context information for an error."""
    drive_letter: Optional[str] = None
    remote_path: Optional[str] = None
    operation: Optional[str] = None
    aws_operation: Optional[str] = None
    request_id: Optional[str] = None
    additional_info: Optional[Dict[str, Any]] = None


class MountError(Exception):
    """Base exception for reconciliation errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
        suggestions: Optional[List[str]] = None
    ):
        """Initialize mount error.

        Args:
            message: Human-readable error message
            category: Error category
            severity: Error severity
            context: Additional context about the error
            cause: Original exception that caused this error
            suggestions: List of suggested fixes
        """
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.cause = cause
        self.suggestions = suggestions or []

    def to_user_message(self) -> str:
        """Convert error to user-friendly message.

        Returns:
            Formatted error message for display to user
        """
        lines = [f"{self.severity.value.upper()}: {self.message}"]

        if self.context.drive_letter:
            lines.append(f"   Drive: {self.context.drive_letter}")
        if self.context.operation:
            lines.append(f"   Operation: {self.context.operation}")

        if self.cause:
            lines.append(f"   Cause: {str(self.cause)}")

        if self.suggestions:
            lines.append("\nSuggested fixes:")
            for i, suggestion in enumerate(self.suggestions, 1):
                lines.append(f"   {i}. {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the error
        """
        return {
            'message': self.message,
            'category': self.category.value,
            'severity': self.severity.value,
            'context': {
                'drive_letter': self.context.drive_letter,
                'remote_path': self.context.remote_path,
                'operation': self.context.operation,
                'aws_operation': self.context.aws_operation,
                'request_id': self.context.request_id,
                'additional_info': self.context.additional_info
            },
            'cause': str(self.cause) if self.cause else None,
            'suggestions': self.suggestions
        }


class ConfigurationError(MountError):
    """Error in configuration file or settings."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.CRITICAL,
            **kwargs
        )


class CredentialError(MountError):
    """A mount's credential could not be resolved."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.CREDENTIAL,
            severity=ErrorSeverity.ERROR,
            **kwargs
        )


class ConflictError(MountError):
    """The drive letter is held by something that is not a network mapping."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.CONFLICT,
            severity=ErrorSeverity.ERROR,
            **kwargs
        )


class PlatformError(MountError):
    """An OS query or mapping operation failed."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.PLATFORM,
            severity=ErrorSeverity.ERROR,
            **kwargs
        )


class VerificationError(MountError):
    """A freshly created mapping did not pass inspection."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.VERIFICATION,
            severity=ErrorSeverity.ERROR,
            **kwargs
        )


class ErrorHandler:
    """Handles and categorizes errors from the OS, AWS and other sources."""

    # Secrets Manager error codes seen when resolving a mount credential
    AWS_ERROR_MAPPING = {
        'ResourceNotFoundException': {
            'message': 'Secret not found',
            'suggestions': [
                'Verify the secret name in the mount credential',
                'Check that the secret exists in the configured region'
            ]
        },
        'AccessDeniedException': {
            'message': 'Access denied reading secret',
            'suggestions': [
                'Grant secretsmanager:GetSecretValue on the secret',
                'Check which AWS profile the agent runs with'
            ]
        },
        'DecryptionFailure': {
            'message': 'Secret could not be decrypted',
            'suggestions': [
                'Grant kms:Decrypt on the key protecting the secret'
            ]
        },
        'ExpiredTokenException': {
            'message': 'AWS session token has expired',
            'suggestions': [
                'Refresh the AWS session credentials used by the agent'
            ]
        },
        'InvalidRequestException': {
            'message': 'Secret is not retrievable',
            'suggestions': [
                'Check whether the secret is scheduled for deletion'
            ]
        }
    }

    def __init__(self):
        """Initialize error handler."""
        self.logger = get_logger(__name__)

    def handle_exception(
        self,
        error: Exception,
        context: Optional[ErrorContext] = None
    ) -> MountError:
        """Handle an exception and convert to MountError.

        Args:
            error: The exception to handle
            context: Additional context about where the error occurred

        Returns:
            MountError with categorization and suggestions
        """
        context = context or ErrorContext()

        if isinstance(error, MountError):
            return error

        if isinstance(error, ClientError):
            return self._handle_aws_error(error, context)

        if isinstance(error, (NoCredentialsError, PartialCredentialsError)):
            return CredentialError(
                message='No usable AWS credentials for secret lookup',
                context=context,
                cause=error,
                suggestions=[
                    'Configure an AWS profile for the account running the agent',
                    'Set secrets.aws.profile in the configuration file'
                ]
            )

        if isinstance(error, subprocess.TimeoutExpired):
            return PlatformError(
                message=f'Command timed out after {error.timeout} seconds',
                context=context,
                cause=error,
                suggestions=['Check that the file server is reachable from this machine']
            )

        if isinstance(error, OSError):
            return PlatformError(
                message=f'OS error: {error}',
                context=context,
                cause=error
            )

        return MountError(
            message=str(error),
            category=ErrorCategory.UNKNOWN,
            severity=ErrorSeverity.ERROR,
            context=context,
            cause=error,
            suggestions=['Check logs for more details']
        )

    def _handle_aws_error(
        self,
        error: ClientError,
        context: ErrorContext
    ) -> CredentialError:
        """Handle AWS ClientError.

        Args:
            error: The ClientError
            context: Error context

        Returns:
            Categorized CredentialError
        """
        error_code = error.response.get('Error', {}).get('Code', 'Unknown')
        error_message = error.response.get('Error', {}).get('Message', str(error))
        context.request_id = error.response.get('ResponseMetadata', {}).get('RequestId')
        context.aws_operation = getattr(error, 'operation_name', None)

        error_info = self.AWS_ERROR_MAPPING.get(error_code)
        if error_info:
            return CredentialError(
                message=f"{error_info['message']}: {error_message}",
                context=context,
                cause=error,
                suggestions=error_info['suggestions']
            )

        return CredentialError(
            message=f"AWS Error ({error_code}): {error_message}",
            context=context,
            cause=error,
            suggestions=[f'AWS Request ID: {context.request_id}']
        )

    def log_error(self, error: MountError):
        """Log an error with appropriate level.

        Args:
            error: The error to log
        """
        log_message = error.to_user_message()

        if error.severity in (ErrorSeverity.CRITICAL, ErrorSeverity.ERROR):
            self.logger.error(log_message)
        elif error.severity == ErrorSeverity.WARNING:
            self.logger.warning(log_message)
        else:
            self.logger.info(log_message)

        self.logger.debug(f"Error details: {error.to_dict()}")


# Global error handler instance
error_handler = ErrorHandler()
