"""YAML configuration parser for the mount agent."""

from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import ValidationError

from mountwarden.utils.errors import ConfigurationError

from .models import AgentConfig, LoggingConfig, MountSpec, SecretsConfig


class ConfigValidationError(ConfigurationError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, errors: Optional[List[Dict]] = None):
        super().__init__(message)
        self.errors = errors or []

    def __str__(self) -> str:
        """Format validation errors for display."""
        if not self.errors:
            return self.message

        error_lines = [self.message, ""]
        for error in self.errors:
            location = " -> ".join(str(loc) for loc in error.get("loc", []))
            msg = error.get("msg", "Unknown error")
            error_lines.append(f"  - {location}: {msg}")

        return "\n".join(error_lines)


class Config:
    """Configuration manager for the mount agent."""

    def __init__(self, config_path: str):
        """Initialize configuration manager.

        Args:
            config_path: Path to the YAML configuration file
        """
        self.config_path = Path(config_path)
        self.data: Dict = {}
        self.agent: Optional[AgentConfig] = None

    def load(self) -> "Config":
        """Load and validate configuration from YAML file.

        Returns:
            Self for method chaining

        Raises:
            ConfigValidationError: If configuration is invalid
            FileNotFoundError: If configuration file doesn't exist
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                self.data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Failed to parse YAML: {e}")

        if not isinstance(self.data, dict):
            raise ConfigValidationError("Configuration must be a mapping at the top level")

        validation_errors = self.validate()
        if validation_errors:
            raise ConfigValidationError(
                f"Configuration validation failed with {len(validation_errors)} error(s)",
                validation_errors,
            )

        try:
            self.agent = AgentConfig.model_validate(self.data)
        except ValidationError as e:
            raise ConfigValidationError(
                "Configuration validation failed",
                [{"loc": list(error["loc"]), "msg": error["msg"]} for error in e.errors()],
            ) from e
        return self

    def validate(self) -> List[Dict]:
        """Validate configuration against schema.

        Every mount is checked on its own so that one bad entry does not hide
        problems in the others.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        mounts = self.data.get("mounts")
        if mounts is None:
            errors.append({"loc": ["mounts"], "msg": "Required field 'mounts' is missing"})
        elif not isinstance(mounts, list) or len(mounts) == 0:
            errors.append({"loc": ["mounts"], "msg": "At least one mount must be defined"})
        else:
            letters: Dict[str, int] = {}
            for idx, mount_data in enumerate(mounts):
                if not isinstance(mount_data, dict):
                    errors.append({"loc": ["mounts", idx], "msg": "Mount must be a mapping"})
                    continue
                try:
                    mount = MountSpec.model_validate(mount_data)
                except ValidationError as e:
                    for error in e.errors():
                        errors.append(
                            {
                                "loc": ["mounts", idx] + list(error["loc"]),
                                "msg": error["msg"],
                            }
                        )
                    continue

                if mount.drive_letter in letters:
                    errors.append(
                        {
                            "loc": ["mounts", idx, "drive_letter"],
                            "msg": (
                                f"Drive letter {mount.drive_letter} is already used "
                                f"by mount {letters[mount.drive_letter]}"
                            ),
                        }
                    )
                else:
                    letters[mount.drive_letter] = idx

        for section, model in (("logging", LoggingConfig), ("secrets", SecretsConfig)):
            if section not in self.data:
                continue
            try:
                model.model_validate(self.data[section])
            except ValidationError as e:
                for error in e.errors():
                    errors.append(
                        {
                            "loc": [section] + list(error["loc"]),
                            "msg": error["msg"],
                        }
                    )

        return errors

    @property
    def mounts(self) -> List[MountSpec]:
        """Validated mount specifications in file order."""
        return self.agent.mounts if self.agent else []

    def get_mount(self, drive_letter: str) -> Optional[MountSpec]:
        """Get a mount specification by drive letter.

        Args:
            drive_letter: Drive letter such as ``Z:``

        Returns:
            Mount specification or None if not configured
        """
        for mount in self.mounts:
            if mount.drive_letter == drive_letter:
                return mount
        return None

    def to_dict(self) -> Dict:
        """Convert configuration to dictionary.

        Secrets are rendered masked.

        Returns:
            Dictionary representation of configuration
        """
        if not self.agent:
            return {}
        return self.agent.model_dump(mode="json")
