from __future__ import annotations

from typing import Optional

import pytest

from mountwarden.config.models import MountSpec
from mountwarden.credentials.models import ResolvedCredential
from mountwarden.platform.base import BasePlatform
from mountwarden.reconcile.models import DriveObservation, NETWORK_DRIVE_TYPE
from mountwarden.utils.errors import PlatformError


def network_observation(letter: str, provider: str) -> DriveObservation:
    return DriveObservation(
        device_id=letter, volume_label=None, drive_type=NETWORK_DRIVE_TYPE, provider_name=provider
    )


class FakePlatform(BasePlatform):
    """In-memory mapping table standing in for the OS."""

    def __init__(self):
        self.disks: dict[str, DriveObservation] = {}
        self.reachable: set[str] = set()
        self.calls: list[tuple] = []
        self.fail_detach: set[str] = set()
        self.fail_attach: set[str] = set()
        # Attach reports success without the mapping becoming visible
        self.silent_attach: set[str] = set()

    def share(self, *paths: str) -> "FakePlatform":
        self.reachable.update(paths)
        return self

    def map(self, letter: str, provider: str) -> "FakePlatform":
        self.disks[letter] = network_observation(letter, provider)
        self.reachable.add(f"{letter}\\")
        return self

    def query_logical_disk(self, drive_letter: str) -> Optional[DriveObservation]:
        self.calls.append(("query", drive_letter))
        return self.disks.get(drive_letter)

    def exists(self, path: str) -> bool:
        return path in self.reachable

    def detach(self, drive_letter: str) -> None:
        self.calls.append(("detach", drive_letter))
        if drive_letter in self.fail_detach:
            raise PlatformError("The network connection could not be found.")
        self.disks.pop(drive_letter, None)
        self.reachable.discard(f"{drive_letter}\\")

    def attach(
        self,
        drive_letter: str,
        remote_path: str,
        credential: Optional[ResolvedCredential] = None,
    ) -> None:
        self.calls.append(("attach", drive_letter, remote_path, credential))
        if drive_letter in self.fail_attach:
            raise PlatformError("System error 53 has occurred. The network path was not found.")
        if drive_letter in self.silent_attach:
            return
        self.map(drive_letter, remote_path)

    def get_platform_name(self) -> str:
        return "Fake"

    def mutations(self) -> list[tuple]:
        return [call for call in self.calls if call[0] in ("detach", "attach")]


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def docs_spec() -> MountSpec:
    return MountSpec(drive_letter="Z:", remote_path="\\\\S\\Docs")


@pytest.fixture
def media_spec() -> MountSpec:
    return MountSpec(drive_letter="Y:", remote_path="\\\\S\\Media")
