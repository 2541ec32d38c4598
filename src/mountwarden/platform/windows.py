"""Windows drive mapping through PowerShell and net use."""

import json
import os
import subprocess
from typing import Dict, List, Optional

from pydantic import ValidationError

from mountwarden.credentials.models import ResolvedCredential
from mountwarden.reconcile.models import DriveObservation
from mountwarden.utils.errors import ErrorContext, PlatformError, error_handler
from mountwarden.utils.logging import get_logger

from .base import BasePlatform

logger = get_logger(__name__)

# Environment variables carrying the mapping credential into PowerShell
USER_ENV = "MOUNTWARDEN_USER"
SECRET_ENV = "MOUNTWARDEN_SECRET"

QUERY_SCRIPT = (
    "Get-CimInstance -ClassName Win32_LogicalDisk -Filter \"DeviceID='{letter}'\" | "
    "Select-Object DeviceID, VolumeName, DriveType, ProviderName | ConvertTo-Json -Compress"
)

ATTACH_SCRIPT = (
    "$ErrorActionPreference = 'Stop'; "
    "$params = @{{ Name = '{name}'; PSProvider = 'FileSystem'; Root = '{root}'; "
    "Persist = $true; Scope = 'Global' }}; "
    "if ($env:" + USER_ENV + ") {{ "
    "$secure = ConvertTo-SecureString $env:" + SECRET_ENV + " -AsPlainText -Force; "
    "$params.Credential = New-Object System.Management.Automation.PSCredential("
    "$env:" + USER_ENV + ", $secure) }}; "
    "New-PSDrive @params | Out-Null"
)


def _ps_quote(value: str) -> str:
    """Escape a value for a single-quoted PowerShell string."""
    return value.replace("'", "''")


class WindowsPlatform(BasePlatform):
    """Windows-specific drive mapping implementation."""

    def __init__(self, timeout: int = 60):
        """Initialize Windows platform.

        Args:
            timeout: Seconds to wait for each PowerShell or net command
        """
        self.timeout = timeout

    def _run(
        self,
        command: List[str],
        operation: str,
        drive_letter: str,
        env: Optional[Dict[str, str]] = None
    ) -> subprocess.CompletedProcess:
        """Run a command, converting timeouts and launch failures to PlatformError."""
        context = ErrorContext(drive_letter=drive_letter, operation=operation)
        try:
            return subprocess.run(
                command,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                env=env,
            )
        except (subprocess.TimeoutExpired, OSError) as e:
            raise error_handler.handle_exception(e, context) from e

    def _powershell(
        self,
        script: str,
        operation: str,
        drive_letter: str,
        env: Optional[Dict[str, str]] = None
    ) -> subprocess.CompletedProcess:
        return self._run(
            ["powershell", "-NoProfile", "-NonInteractive", "-Command", script],
            operation,
            drive_letter,
            env=env,
        )

    @staticmethod
    def _failure_detail(result: subprocess.CompletedProcess) -> str:
        detail = (result.stderr or result.stdout or "").strip()
        return detail or f"exit code {result.returncode}"

    def query_logical_disk(self, drive_letter: str) -> Optional[DriveObservation]:
        """Query Win32_LogicalDisk for the drive letter."""
        result = self._powershell(
            QUERY_SCRIPT.format(letter=drive_letter), "query_logical_disk", drive_letter
        )
        if result.returncode != 0:
            raise PlatformError(
                f"could not query logical disk {drive_letter}: {self._failure_detail(result)}",
                context=ErrorContext(drive_letter=drive_letter, operation="query_logical_disk"),
            )

        raw = (result.stdout or "").strip()
        if not raw:
            return None

        try:
            data = json.loads(raw)
            if isinstance(data, list):
                data = data[0] if data else None
            if data is None:
                return None
            return DriveObservation.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise PlatformError(
                f"unexpected logical disk data for {drive_letter}: {raw}",
                context=ErrorContext(drive_letter=drive_letter, operation="query_logical_disk"),
                cause=e,
            ) from e

    def exists(self, path: str) -> bool:
        try:
            return os.path.exists(path)
        except OSError as e:
            logger.debug(f"Probe of {path} failed: {e}")
            return False

    def detach(self, drive_letter: str) -> None:
        """Remove the mapping with ``net use <letter> /delete /y``."""
        result = self._run(
            ["net", "use", drive_letter, "/delete", "/y"], "detach", drive_letter
        )
        if result.returncode != 0:
            raise PlatformError(
                self._failure_detail(result),
                context=ErrorContext(drive_letter=drive_letter, operation="detach"),
            )
        logger.debug(f"Removed mapping {drive_letter}")

    def attach(
        self,
        drive_letter: str,
        remote_path: str,
        credential: Optional[ResolvedCredential] = None
    ) -> None:
        """Create the mapping with ``New-PSDrive -Persist -Scope Global``."""
        script = ATTACH_SCRIPT.format(
            name=_ps_quote(drive_letter.rstrip(":")),
            root=_ps_quote(remote_path),
        )

        env = dict(os.environ)
        env.pop(USER_ENV, None)
        env.pop(SECRET_ENV, None)
        if credential is not None:
            env[USER_ENV] = credential.user_name
            env[SECRET_ENV] = credential.secret.get_secret_value()

        result = self._powershell(script, "attach", drive_letter, env=env)
        if result.returncode != 0:
            raise PlatformError(
                self._failure_detail(result),
                context=ErrorContext(
                    drive_letter=drive_letter, remote_path=remote_path, operation="attach"
                ),
            )
        logger.debug(f"Mapped {drive_letter} to {remote_path}")

    def get_platform_name(self) -> str:
        return "Windows"
