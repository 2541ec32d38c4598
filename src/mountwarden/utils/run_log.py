"""Writes the outcome of a reconciliation run to the log."""

import getpass
import logging
import socket
from typing import List, Optional

from mountwarden.reconcile.models import MountStatus, ReconcileReport
from mountwarden.utils.logging import LogContext, get_logger

logger = get_logger("mountwarden.run")

SEPARATOR = "=" * 60


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"


def build_header(report: ReconcileReport, config_path: Optional[str] = None) -> List[str]:
    """Build the header block that opens a run log entry."""
    lines = [
        SEPARATOR,
        f"Reconciliation run {report.started_at.strftime('%Y-%m-%d %H:%M:%S')}",
        f"Host: {socket.gethostname()}  User: {_current_user()}",
    ]
    if config_path:
        lines.append(f"Configuration: {config_path}")
    lines.append(
        f"Mounts: {len(report.outcomes)} total, {len(report.mounted)} mounted, "
        f"{len(report.skipped)} already mounted, {len(report.failed)} failed"
    )
    lines.append(SEPARATOR)
    return lines


def write_run_log(
    report: ReconcileReport,
    config_path: Optional[str] = None,
    run_logger: Optional[logging.Logger] = None
) -> bool:
    """Log the header and every outcome's trace lines.

    Runs where every mount was already correctly mounted produce nothing.

    Args:
        report: Report of the finished run
        config_path: Configuration file the run used
        run_logger: Logger to write to (defaults to ``mountwarden.run``)

    Returns:
        True if anything was logged
    """
    run_logger = run_logger or logger
    if not report.has_changes():
        return False

    for line in build_header(report, config_path):
        run_logger.info(line)

    for outcome in report.outcomes:
        if not outcome.trace:
            continue
        level = logging.ERROR if outcome.status == MountStatus.FAILED else logging.INFO
        with LogContext(
            run_logger,
            drive_letter=outcome.drive_letter,
            remote_path=outcome.remote_path,
            status=outcome.status.value,
        ):
            for line in outcome.trace[:-1]:
                run_logger.info(line)
            # Terminal line carries the outcome's level
            run_logger.log(level, outcome.trace[-1])

    return True
