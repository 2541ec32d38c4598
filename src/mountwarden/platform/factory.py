"""Platform detection and collaborator creation."""

import platform

from .base import BasePlatform


class UnsupportedPlatformError(Exception):
    """Raised when the OS has no drive mapping implementation."""
    pass


def detect_platform() -> str:
    """Detect current platform. Returns: macos, windows, or linux."""
    system = platform.system().lower()
    if system == "darwin":
        return "macos"
    return system


def get_platform(timeout: int = 60) -> BasePlatform:
    """Create the platform collaborator for this machine.

    Raises:
        UnsupportedPlatformError: When not running on Windows
    """
    platform_name = detect_platform()
    if platform_name == "windows":
        from .windows import WindowsPlatform
        return WindowsPlatform(timeout=timeout)
    raise UnsupportedPlatformError(
        f"Drive letter mappings are not supported on platform: {platform_name}"
    )
