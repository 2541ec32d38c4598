"""OS collaborators that inspect and change drive mappings."""

from .base import BasePlatform
from .factory import UnsupportedPlatformError, detect_platform, get_platform
from .windows import WindowsPlatform

__all__ = [
    "BasePlatform",
    "UnsupportedPlatformError",
    "detect_platform",
    "get_platform",
    "WindowsPlatform",
]
