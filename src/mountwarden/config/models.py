"""Pydantic models for configuration schema."""

from pathlib import Path
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mountwarden.credentials.models import (
    EnvironmentSecret,
    LiteralSecret,
    SecretsManagerSecret,
    SecretSource,
)

SECRET_PREFIXES = {
    "ENV:": EnvironmentSecret,
    "AWS:": SecretsManagerSecret,
}


def parse_secret_source(value: Any) -> Any:
    """Turn the configured secret into a ``SecretSource`` variant.

    Strings starting with ``ENV:`` or ``AWS:`` name an indirect secret, any
    other string is the literal value. Mappings may spell the variant out as
    ``{env: NAME}``, ``{aws: NAME}`` or ``{value: SECRET}``.
    """
    if isinstance(value, str):
        for prefix, source_cls in SECRET_PREFIXES.items():
            if value.startswith(prefix):
                return source_cls(name=value[len(prefix):])
        return LiteralSecret(value=value)

    if isinstance(value, dict) and "kind" not in value:
        if "env" in value:
            return EnvironmentSecret(name=value["env"])
        if "aws" in value:
            return SecretsManagerSecret(name=value["aws"])
        if "value" in value:
            return LiteralSecret(value=value["value"])

    return value


class CredentialConfig(BaseModel):
    """Credentials used when creating a mapping."""

    model_config = ConfigDict(frozen=True)

    user_name: str = Field(..., min_length=1)
    secret: Optional[SecretSource] = None

    @field_validator("secret", mode="before")
    @classmethod
    def validate_secret(cls, v: Any) -> Any:
        """Accept the prefixed string and short mapping forms."""
        return parse_secret_source(v)

    @model_validator(mode="after")
    def validate_secret_present(self):
        """A user name is useless without a secret."""
        if self.secret is None:
            raise ValueError(f"secret is required when user_name is set ({self.user_name})")
        return self


class MountSpec(BaseModel):
    """A desired drive mapping."""

    model_config = ConfigDict(frozen=True)

    drive_letter: str = Field(..., pattern="^[A-Z]:$", description="Drive letter, e.g. Z:")
    remote_path: str = Field(..., min_length=1, description="UNC path of the share")
    credential: Optional[CredentialConfig] = None

    @field_validator("remote_path")
    @classmethod
    def validate_remote_path(cls, v: str) -> str:
        """Validate the share address is a UNC path."""
        if not v.strip():
            raise ValueError("remote_path cannot be blank")
        if not v.startswith("\\\\"):
            raise ValueError(f"remote_path must be a UNC path (\\\\server\\share): {v}")
        return v


class LoggingConfig(BaseModel):
    """Run log settings."""

    directory: Path = Field(Path("logs"), description="Directory for run log files")
    retention_days: int = Field(30, ge=1, le=3650)
    level: str = Field("info", pattern="^(debug|info|warning|error)$")


class AWSSecretsConfig(BaseModel):
    """AWS Secrets Manager access."""

    profile: Optional[str] = None
    region: Optional[str] = None


class SecretsConfig(BaseModel):
    """Secret store settings."""

    aws: AWSSecretsConfig = Field(default_factory=AWSSecretsConfig)


class AgentConfig(BaseModel):
    """Complete agent configuration."""

    mounts: List[MountSpec] = Field(..., min_length=1)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    secrets: SecretsConfig = Field(default_factory=SecretsConfig)

    @model_validator(mode="after")
    def validate_unique_letters(self):
        """Each drive letter may be claimed by one mount only."""
        seen = set()
        for mount in self.mounts:
            if mount.drive_letter in seen:
                raise ValueError(f"drive letter {mount.drive_letter} is configured more than once")
            seen.add(mount.drive_letter)
        return self
