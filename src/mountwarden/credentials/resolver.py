"""Credential resolution for mounts that authenticate against the share.

A mount credential names its secret through one of the ``SecretSource``
variants. Resolution happens once per mount, only when a mapping is about to
be created, and yields a :class:`ResolvedCredential` whose secret is a
``SecretStr`` so it never appears in reprs, logs or trace lines.
"""

import os
from typing import Mapping, Optional

import boto3
from botocore.exceptions import ClientError

from mountwarden.credentials.models import (
    EnvironmentSecret,
    LiteralSecret,
    ResolvedCredential,
    SecretsManagerSecret,
    SecretSource,
)
from mountwarden.utils.errors import CredentialError, ErrorContext, error_handler
from mountwarden.utils.logging import get_logger

logger = get_logger(__name__)


class EnvironmentStore:
    """Key-value lookup over the process environment."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = environ if environ is not None else os.environ

    def get(self, name: str) -> Optional[str]:
        return self._environ.get(name)


class SecretsManagerStore:
    """Key-value lookup over AWS Secrets Manager."""

    def __init__(
        self,
        profile: Optional[str] = None,
        region: Optional[str] = None,
        client=None
    ):
        """Initialize the store.

        Args:
            profile: AWS profile name
            region: AWS region
            client: Preconfigured ``secretsmanager`` client; created lazily when None
        """
        self.profile = profile
        self.region = region
        self._client = client

    @property
    def client(self):
        if self._client is None:
            session = boto3.Session(profile_name=self.profile, region_name=self.region)
            self._client = session.client('secretsmanager')
        return self._client

    def get(self, name: str) -> Optional[str]:
        """Return the secret string, or None when the secret does not exist.

        Raises:
            CredentialError: If the secret holds only binary data
            botocore.exceptions.ClientError: For any AWS failure other than a missing secret
        """
        try:
            response = self.client.get_secret_value(SecretId=name)
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') == 'ResourceNotFoundException':
                return None
            raise
        if 'SecretString' not in response:
            raise CredentialError(
                f"secret '{name}' has no string value",
                context=ErrorContext(operation='resolve_credential'),
                suggestions=['Store the password as SecretString rather than SecretBinary']
            )
        return response['SecretString']


class SecretResolver:
    """Resolves ``SecretSource`` values against the configured stores."""

    def __init__(
        self,
        environment: Optional[EnvironmentStore] = None,
        secrets_manager: Optional[SecretsManagerStore] = None
    ):
        self.environment = environment or EnvironmentStore()
        self.secrets_manager = secrets_manager or SecretsManagerStore()

    def resolve(self, user_name: str, source: SecretSource) -> ResolvedCredential:
        """Resolve a credential.

        Args:
            user_name: Account used to connect to the share
            source: Where the secret comes from

        Returns:
            ResolvedCredential wrapping the secret value

        Raises:
            CredentialError: If the named secret cannot be found or read
        """
        if isinstance(source, LiteralSecret):
            return ResolvedCredential(user_name=user_name, secret=source.value)

        if isinstance(source, EnvironmentSecret):
            value = self.environment.get(source.name)
            if value is None:
                raise CredentialError(
                    f"environment variable '{source.name}' is not set",
                    context=ErrorContext(operation='resolve_credential'),
                    suggestions=[f"Set {source.name} for the account running the agent"]
                )
            return ResolvedCredential(user_name=user_name, secret=value)

        if isinstance(source, SecretsManagerSecret):
            context = ErrorContext(operation='resolve_credential')
            try:
                value = self.secrets_manager.get(source.name)
            except Exception as e:
                raise error_handler.handle_exception(e, context) from e
            if value is None:
                raise CredentialError(
                    f"secret '{source.name}' not found in AWS Secrets Manager",
                    context=context
                )
            logger.debug(f"Resolved secret '{source.name}' from AWS Secrets Manager")
            return ResolvedCredential(user_name=user_name, secret=value)

        raise CredentialError(f"unsupported secret source: {type(source).__name__}")
