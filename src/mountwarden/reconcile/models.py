"""Data models for mount reconciliation."""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

# Win32_LogicalDisk.DriveType values
DRIVE_TYPE_NAMES = {
    0: "Unknown",
    1: "No Root Directory",
    2: "Removable Disk",
    3: "Local Disk",
    4: "Network Drive",
    5: "Compact Disc",
    6: "RAM Disk",
}
NETWORK_DRIVE_TYPE = 4


class DriveObservation(BaseModel):
    """What the OS reports for the logical disk at a drive letter."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    device_id: str = Field(..., alias="DeviceID", description="Drive letter, e.g. Z:")
    volume_label: Optional[str] = Field(None, alias="VolumeName")
    drive_type: int = Field(..., alias="DriveType")
    provider_name: Optional[str] = Field(None, alias="ProviderName", description="Bound remote path")

    @property
    def is_network(self) -> bool:
        return self.drive_type == NETWORK_DRIVE_TYPE

    @property
    def drive_type_name(self) -> str:
        return DRIVE_TYPE_NAMES.get(self.drive_type, f"Type {self.drive_type}")


class InspectionResult(BaseModel):
    """Whether a letter is correctly mounted, and why not."""

    model_config = ConfigDict(frozen=True)

    is_mounted: bool
    reason: Optional[str] = None


class MountStatus(Enum):
    """Terminal state of one mount in a run."""
    SKIPPED = "skipped"  # Already correctly mounted
    MOUNTED = "mounted"  # Mapping (re)created and verified
    FAILED = "failed"


class MountOutcome(BaseModel):
    """Result of reconciling one mount."""

    model_config = ConfigDict(frozen=True)

    drive_letter: str = Field(..., description="Drive letter of the mount")
    remote_path: str = Field(..., description="Expected remote path")
    status: MountStatus
    reason: Optional[str] = Field(None, description="Failure reason")
    trace: Tuple[str, ...] = Field(default_factory=tuple, description="Decision trace lines")

    @property
    def succeeded(self) -> bool:
        return self.status != MountStatus.FAILED


class ReconcileReport(BaseModel):
    """Outcomes of one reconciliation run, in configuration order."""

    outcomes: List[MountOutcome] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    def has_changes(self) -> bool:
        """True when any mount produced trace lines worth logging."""
        return any(outcome.trace for outcome in self.outcomes)

    def has_failures(self) -> bool:
        return any(not outcome.succeeded for outcome in self.outcomes)

    def get_by_status(self, status: MountStatus) -> List[MountOutcome]:
        """Get outcomes with the given status."""
        return [o for o in self.outcomes if o.status == status]

    @property
    def mounted(self) -> List[MountOutcome]:
        return self.get_by_status(MountStatus.MOUNTED)

    @property
    def skipped(self) -> List[MountOutcome]:
        return self.get_by_status(MountStatus.SKIPPED)

    @property
    def failed(self) -> List[MountOutcome]:
        return self.get_by_status(MountStatus.FAILED)
