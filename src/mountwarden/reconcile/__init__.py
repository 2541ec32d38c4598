"""Mount state inspection and reconciliation."""

from mountwarden.reconcile.models import (
    DriveObservation,
    InspectionResult,
    MountOutcome,
    MountStatus,
    NETWORK_DRIVE_TYPE,
    ReconcileReport,
)

__all__ = [
    "DriveObservation",
    "InspectionResult",
    "MountOutcome",
    "MountStatus",
    "NETWORK_DRIVE_TYPE",
    "ReconcileReport",
]
