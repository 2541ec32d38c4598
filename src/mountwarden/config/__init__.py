"""Configuration management for the mount agent."""

from .models import (
    AgentConfig,
    AWSSecretsConfig,
    CredentialConfig,
    LoggingConfig,
    MountSpec,
    SecretsConfig,
    parse_secret_source,
)
from .parser import Config, ConfigValidationError

__all__ = [
    "AgentConfig",
    "AWSSecretsConfig",
    "CredentialConfig",
    "LoggingConfig",
    "MountSpec",
    "SecretsConfig",
    "parse_secret_source",
    "Config",
    "ConfigValidationError",
]
