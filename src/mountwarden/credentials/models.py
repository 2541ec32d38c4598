"""Secret source variants and resolved credentials."""

from typing import Literal, Union
from pydantic import BaseModel, ConfigDict, Field, SecretStr


class LiteralSecret(BaseModel):
    """Secret given verbatim in the configuration."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["literal"] = "literal"
    value: SecretStr = Field(..., description="Secret value")


class EnvironmentSecret(BaseModel):
    """Secret read from a process environment variable."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["env"] = "env"
    name: str = Field(..., min_length=1, description="Environment variable name")


class SecretsManagerSecret(BaseModel):
    """Secret read from AWS Secrets Manager."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["aws"] = "aws"
    name: str = Field(..., min_length=1, description="Secret name or ARN")


SecretSource = Union[LiteralSecret, EnvironmentSecret, SecretsManagerSecret]


class ResolvedCredential(BaseModel):
    """User name plus secret handle, valid for a single run."""

    model_config = ConfigDict(frozen=True)

    user_name: str
    secret: SecretStr
