"""Decides whether a drive letter is correctly mounted."""

from typing import Callable, Optional

from mountwarden.reconcile.models import DriveObservation, InspectionResult

NO_LOGICAL_DISK = "no logical disk at this letter"
TARGET_MISMATCH = "bound target does not match expected path"
LETTER_INACCESSIBLE = "drive letter path inaccessible"
REMOTE_INACCESSIBLE = "remote path inaccessible"


def normalize_remote_path(path: Optional[str]) -> str:
    """Normalize a UNC path for comparison (case and trailing separators)."""
    return (path or "").rstrip("\\/").lower()


class MountInspector:
    """Checks an observation against the expected mapping.

    Checks run in a fixed order and stop at the first failure, so the
    reported reason is always the earliest one that applies.
    """

    def __init__(self, exists: Callable[[str], bool]):
        """Initialize the inspector.

        Args:
            exists: Path accessibility probe
        """
        self.exists = exists

    def inspect(
        self,
        drive_letter: str,
        expected_remote_path: str,
        observation: Optional[DriveObservation]
    ) -> InspectionResult:
        if observation is None:
            return InspectionResult(is_mounted=False, reason=NO_LOGICAL_DISK)

        if normalize_remote_path(observation.provider_name) != normalize_remote_path(expected_remote_path):
            return InspectionResult(is_mounted=False, reason=TARGET_MISMATCH)

        if not self.exists(f"{drive_letter}\\"):
            return InspectionResult(is_mounted=False, reason=LETTER_INACCESSIBLE)

        if not self.exists(expected_remote_path):
            return InspectionResult(is_mounted=False, reason=REMOTE_INACCESSIBLE)

        return InspectionResult(is_mounted=True)
