"""Reconciles configured drive mappings against the machine's actual state."""

from datetime import datetime
from typing import Callable, Iterable, List, Optional, Tuple, Type

from mountwarden.config.models import MountSpec
from mountwarden.credentials.models import ResolvedCredential
from mountwarden.credentials.resolver import SecretResolver
from mountwarden.platform.base import BasePlatform
from mountwarden.reconcile.inspector import MountInspector
from mountwarden.reconcile.models import (
    DriveObservation,
    InspectionResult,
    MountOutcome,
    MountStatus,
    ReconcileReport,
)
from mountwarden.utils.errors import (
    ConflictError,
    CredentialError,
    ErrorContext,
    MountError,
    PlatformError,
    VerificationError,
    error_handler,
)
from mountwarden.utils.logging import LogContext, get_logger

logger = get_logger(__name__)

REDACTED = "********"


class MountReconciler:
    """Brings each configured mount to its desired state, one at a time.

    Mounts are processed sequentially in the order given. A failure on one
    mount is recorded in its outcome and never stops the remaining mounts.
    """

    def __init__(
        self,
        platform: BasePlatform,
        resolver: Optional[SecretResolver] = None,
        inspector: Optional[MountInspector] = None
    ):
        """Initialize the reconciler.

        Args:
            platform: OS collaborator used for queries and mapping changes
            resolver: Secret resolver for mounts with credentials
            inspector: Mount state inspector (defaults to one using platform.exists)
        """
        self.platform = platform
        self.resolver = resolver or SecretResolver()
        self.inspector = inspector or MountInspector(platform.exists)
        self.logger = get_logger(__name__)

    def reconcile(self, specs: Iterable[MountSpec]) -> ReconcileReport:
        """Run one reconciliation pass over all mounts.

        Args:
            specs: Validated mount specifications

        Returns:
            ReconcileReport with one outcome per spec, in order
        """
        report = ReconcileReport()
        for spec in specs:
            report.outcomes.append(self.reconcile_mount(spec))
        report.finished_at = datetime.now()

        self.logger.debug(
            f"Reconciled {len(report.outcomes)} mounts: {len(report.mounted)} mounted, "
            f"{len(report.skipped)} skipped, {len(report.failed)} failed"
        )
        return report

    def inspect_mount(self, spec: MountSpec) -> Tuple[Optional[DriveObservation], InspectionResult]:
        """Inspect a mount without changing anything.

        Returns:
            The fresh observation and the inspection result
        """
        observation = self.platform.query_logical_disk(spec.drive_letter)
        return observation, self.inspector.inspect(spec.drive_letter, spec.remote_path, observation)

    def reconcile_mount(self, spec: MountSpec) -> MountOutcome:
        """Reconcile a single mount.

        Args:
            spec: Mount specification

        Returns:
            MountOutcome describing what happened
        """
        letter = spec.drive_letter
        path = spec.remote_path
        trace: List[str] = []
        credential: Optional[ResolvedCredential] = None
        context = ErrorContext(drive_letter=letter, remote_path=path)

        with LogContext(self.logger, drive_letter=letter, remote_path=path):
            try:
                observation, result = self.inspect_mount(spec)

                if observation is not None and not observation.is_network:
                    label = f" '{observation.volume_label}'" if observation.volume_label else ""
                    trace.append(
                        f"{letter} is occupied by {observation.drive_type_name}{label}, leaving it untouched"
                    )
                    raise ConflictError(
                        f"letter in use by non-network drive {observation.device_id}{label} "
                        f"of type {observation.drive_type_name} ({observation.drive_type})",
                        context=context,
                    )

                if result.is_mounted:
                    self.logger.debug(f"{letter} already mounted to {path}")
                    return MountOutcome(
                        drive_letter=letter, remote_path=path, status=MountStatus.SKIPPED
                    )

                trace.append(f"{letter} is not correctly mounted to {path}: {result.reason}")

                if observation is not None:
                    trace.append(f"Removing stale mapping {letter} -> {observation.provider_name}")
                    self._step(
                        "could not remove stale mapping", PlatformError, context,
                        self.platform.detach, letter
                    )

                if spec.credential is not None:
                    trace.append(f"Resolving credential for user {spec.credential.user_name}")
                    credential = self._step(
                        "could not resolve credential", CredentialError, context,
                        self.resolver.resolve, spec.credential.user_name, spec.credential.secret
                    )

                user_note = f" as {credential.user_name}" if credential else ""
                trace.append(f"Creating persistent mapping {letter} -> {path}{user_note}")
                self._step(
                    "could not create mapping", PlatformError, context,
                    self.platform.attach, letter, path, credential,
                    credential=credential
                )

                _, verification = self.inspect_mount(spec)
                if not verification.is_mounted:
                    raise VerificationError(verification.reason, context=context)

                trace.append(f"Mounted {letter} -> {path}")
                self.logger.debug(f"{letter} mounted to {path}")
                return MountOutcome(
                    drive_letter=letter,
                    remote_path=path,
                    status=MountStatus.MOUNTED,
                    trace=tuple(trace),
                )

            except Exception as e:
                error = error_handler.handle_exception(e, context)
                reason = error.message
                trace.append(f"Failed to mount {letter} -> {path}: {reason}")
                self.logger.debug(f"{letter} failed ({error.category.value}): {reason}")
                return MountOutcome(
                    drive_letter=letter,
                    remote_path=path,
                    status=MountStatus.FAILED,
                    reason=reason,
                    trace=tuple(trace),
                )

    @staticmethod
    def _step(
        failure: str,
        error_cls: Type[MountError],
        context: ErrorContext,
        operation: Callable,
        *args,
        credential: Optional[ResolvedCredential] = None
    ):
        """Run one mutating or resolving step, prefixing its error with ``failure``.

        The error text comes from outside the agent, so a secret passed to the
        step is masked in it.
        """
        try:
            return operation(*args)
        except Exception as e:
            cause = error_handler.handle_exception(e, context)
            detail = MountReconciler._redact(cause.message, credential)
            leaked = detail != cause.message
            raise error_cls(
                f"{failure}: {detail}", context=context, cause=None if leaked else e
            ) from e

    @staticmethod
    def _redact(text: str, credential: Optional[ResolvedCredential]) -> str:
        """Mask the secret value should it ever leak into a message."""
        if credential is None:
            return text
        secret = credential.secret.get_secret_value()
        if not secret:
            return text
        return text.replace(secret, REDACTED)
