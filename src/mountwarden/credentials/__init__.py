"""Credential sources and resolution for authenticated mappings."""

from mountwarden.credentials.models import (
    EnvironmentSecret,
    LiteralSecret,
    ResolvedCredential,
    SecretsManagerSecret,
    SecretSource,
)
from mountwarden.credentials.resolver import (
    EnvironmentStore,
    SecretResolver,
    SecretsManagerStore,
)

__all__ = [
    "EnvironmentSecret",
    "LiteralSecret",
    "ResolvedCredential",
    "SecretsManagerSecret",
    "SecretSource",
    "EnvironmentStore",
    "SecretResolver",
    "SecretsManagerStore",
]
