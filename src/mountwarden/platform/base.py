"""Base platform interface for drive mapping operations."""

from abc import ABC, abstractmethod
from typing import Optional

from mountwarden.credentials.models import ResolvedCredential
from mountwarden.reconcile.models import DriveObservation


class BasePlatform(ABC):
    """OS collaborator used by the reconciler.

    ``query_logical_disk`` and ``exists`` are read-only probes; ``detach`` and
    ``attach`` are the only operations that change machine state.
    """

    @abstractmethod
    def query_logical_disk(self, drive_letter: str) -> Optional[DriveObservation]:
        """Fetch the logical disk bound to a drive letter.

        Args:
            drive_letter: Drive letter such as ``Z:``

        Returns:
            Current observation or None if nothing occupies the letter
        """
        pass

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Probe whether a path is accessible."""
        pass

    @abstractmethod
    def detach(self, drive_letter: str) -> None:
        """Remove the mapping at a drive letter.

        Raises:
            PlatformError: If the mapping could not be removed
        """
        pass

    @abstractmethod
    def attach(
        self,
        drive_letter: str,
        remote_path: str,
        credential: Optional[ResolvedCredential] = None
    ) -> None:
        """Create a persistent, globally scoped mapping.

        Args:
            drive_letter: Drive letter such as ``Z:``
            remote_path: UNC path of the share
            credential: Credential to connect with, if any

        Raises:
            PlatformError: If the mapping could not be created
        """
        pass

    @abstractmethod
    def get_platform_name(self) -> str:
        """Get platform name for logging."""
        pass
