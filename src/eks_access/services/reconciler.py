"""Access-entry reconciler.

Given an invocation envelope, grants the target role a cluster-admin access
entry on every cluster whose authentication mode supports access entries,
and returns the CompletionSignal to report back to CloudFormation.

``reconcile`` never raises: every failure becomes a FAILED signal, because
the completion response is the only thing the calling stack observes.

Failure policy:
- Listing clusters fails: the whole invocation fails.
- Describing one cluster fails: the cluster is recorded as unreachable and
  the others are still processed; this alone does not fail the invocation.
- Creating an entry or associating its policy fails: recorded per cluster,
  the others are still processed, and the signal is FAILED with every
  per-cluster failure in the reason.
- The time budget runs out: clusters not yet started are reported as not
  started, a cluster still in progress is reported as failed without waiting
  for it, and the signal is FAILED.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..backends.protocol import ClusterAccessBackend
from ..config import ReconcilerConfig
from ..domain import AccessPolicyAssociation, CompletionSignal, InvocationEnvelope
from ..exceptions import DiscoveryError, EksAccessError, InputError, MutationError

logger = logging.getLogger(__name__)


class InvocationBudget:
    """Wall-clock deadline for the cluster work of one invocation.

    The deadline already excludes the slice reserved for delivering the
    completion signal.
    """

    def __init__(self, deadline: float, clock: Callable[[], float] = time.monotonic):
        self.deadline = deadline
        self._clock = clock

    @classmethod
    def from_seconds(
        cls, seconds: float, reserve_seconds: float = 0.0, clock: Callable[[], float] = time.monotonic
    ) -> InvocationBudget:
        return cls(clock() + max(0.0, seconds - reserve_seconds), clock)

    @classmethod
    def from_context(
        cls, context: Any, config: ReconcilerConfig, clock: Callable[[], float] = time.monotonic
    ) -> InvocationBudget:
        """Budget from a Lambda context, falling back to the configured timeout."""
        seconds = float(config.timeout_seconds)
        get_remaining = getattr(context, "get_remaining_time_in_millis", None)
        if callable(get_remaining):
            try:
                seconds = get_remaining() / 1000.0
            except (TypeError, ValueError):
                logger.warning("Could not read remaining time from Lambda context; using configured timeout")
        return cls.from_seconds(seconds, config.callback_reserve_seconds, clock)

    def remaining(self) -> float:
        return max(0.0, self.deadline - self._clock())

    @property
    def exhausted(self) -> bool:
        return self.remaining() <= 0.0


class ClusterStatus(str, Enum):
    UPDATED = "UpdatedClusters"
    EXISTING = "ExistingClusters"
    SKIPPED = "SkippedClusters"
    UNREACHABLE = "UnreachableClusters"
    FAILED = "FailedClusters"
    NOT_STARTED = "NotStartedClusters"


# Outcomes that turn the completion signal into FAILED
_FAILING = (ClusterStatus.FAILED, ClusterStatus.NOT_STARTED)


@dataclass(frozen=True)
class ClusterOutcome:
    name: str
    status: ClusterStatus
    message: Optional[str] = None


class AccessEntryReconciler:
    """Grants one principal cluster-admin access entries across all clusters.

    Args:
        backend: Cluster access capability (boto3 backend or a test fake)
        config: Policy, scope, entry type and time budget settings
        clock: Monotonic clock, injectable for tests
    """

    def __init__(
        self,
        backend: ClusterAccessBackend,
        config: Optional[ReconcilerConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.backend = backend
        self.config = config or ReconcilerConfig()
        self._clock = clock

    def reconcile(self, envelope: InvocationEnvelope, budget: Optional[InvocationBudget] = None) -> CompletionSignal:
        """Reconcile access entries for ``envelope.role_arn``. Never raises."""
        try:
            if not envelope.request_type.mutates:
                logger.info(
                    f"Request type '{envelope.request_type.value or 'unspecified'}' does not grant access; nothing to do"
                )
                return CompletionSignal.success()

            principal_arn = envelope.role_arn
            if not principal_arn:
                raise InputError("missing roleArn", context={"resource_properties": sorted(envelope.resource_properties)})

            if budget is None:
                budget = InvocationBudget.from_seconds(
                    self.config.timeout_seconds, self.config.callback_reserve_seconds, self._clock
                )

            cluster_names = self.backend.list_clusters()
            logger.info(f"Reconciling access entries for {principal_arn} across {len(cluster_names)} clusters")

            outcomes = self._process_all(cluster_names, principal_arn, budget)
            return self._build_signal(principal_arn, outcomes)

        except InputError as e:
            logger.error(f"Invalid invocation: {e}")
            return CompletionSignal.failed(str(e))
        except DiscoveryError as e:
            logger.error(f"Cluster discovery failed: {e}")
            return CompletionSignal.failed(str(e))
        except Exception as e:
            logger.error(f"Reconciliation failed: {e}", exc_info=True)
            return CompletionSignal.failed(f"Reconciliation failed: {e}")

    def _process_all(self, cluster_names: List[str], principal_arn: str, budget: InvocationBudget) -> List[ClusterOutcome]:
        """Process every cluster on worker threads, waiting no longer than the budget.

        With ``max_workers=1`` clusters still run one at a time, in order.
        Clusters still queued at the deadline are reported NOT_STARTED, and a
        cluster still in progress is reported FAILED and left to finish in the
        background, so the completion signal goes out on time.
        """
        if not cluster_names:
            return []
        if budget.exhausted:
            return [self._not_started(name) for name in cluster_names]

        executor = ThreadPoolExecutor(max_workers=min(self.config.max_workers, len(cluster_names)))
        submitted = [
            (name, executor.submit(self._process_within_budget, name, principal_arn, budget)) for name in cluster_names
        ]
        try:
            _, pending = wait([future for _, future in submitted], timeout=budget.remaining())
            if pending:
                logger.warning(f"Time budget ran out with {len(pending)} cluster(s) unfinished")

            outcomes = []
            for name, future in submitted:
                if future.cancel():
                    outcomes.append(self._not_started(name))
                elif future.done():
                    outcomes.append(future.result())
                else:
                    logger.error(f"Cluster '{name}' still in progress when the time budget ran out")
                    outcomes.append(
                        ClusterOutcome(
                            name,
                            ClusterStatus.FAILED,
                            f"cluster '{name}' still in progress when the time budget ran out; "
                            "its access entry may be incomplete",
                        )
                    )
            return outcomes
        finally:
            executor.shutdown(wait=False)

    def _process_within_budget(self, name: str, principal_arn: str, budget: InvocationBudget) -> ClusterOutcome:
        if budget.exhausted:
            return self._not_started(name)
        return self._process_cluster(name, principal_arn)

    @staticmethod
    def _not_started(name: str) -> ClusterOutcome:
        logger.warning(f"Time budget exhausted before processing cluster '{name}'")
        return ClusterOutcome(name, ClusterStatus.NOT_STARTED, f"cluster '{name}' not processed before the time budget ran out")

    def _process_cluster(self, name: str, principal_arn: str) -> ClusterOutcome:
        try:
            descriptor = self.backend.describe_cluster(name)
        except DiscoveryError as e:
            logger.warning(f"Skipping unreachable cluster '{name}': {e}")
            return ClusterOutcome(name, ClusterStatus.UNREACHABLE, str(e))

        if not descriptor.authentication_mode.supports_access_entries:
            logger.info(f"Skipping cluster '{name}': authentication mode {descriptor.authentication_mode.value}")
            return ClusterOutcome(name, ClusterStatus.SKIPPED)

        try:
            entries = self.backend.list_access_entries(name)
            if any(entry.principal_arn == principal_arn for entry in entries):
                if self.config.repair_existing_entries:
                    self._ensure_policy(name, principal_arn)
                logger.info(f"Access entry for {principal_arn} already exists on cluster '{name}'")
                return ClusterOutcome(name, ClusterStatus.EXISTING)

            self._grant(name, principal_arn)
        except EksAccessError as e:
            logger.error(f"Failed to grant access on cluster '{name}': {e}")
            return ClusterOutcome(name, ClusterStatus.FAILED, str(e))

        logger.info(f"Granted {principal_arn} access on cluster '{name}'")
        return ClusterOutcome(name, ClusterStatus.UPDATED)

    def _grant(self, name: str, principal_arn: str) -> None:
        entry_created = False
        try:
            self.backend.create_access_entry(name, principal_arn, self.config.entry_type)
            entry_created = True
        except MutationError as e:
            if not e.context.get("already_exists"):
                raise
            logger.info(f"Access entry for {principal_arn} on cluster '{name}' was created concurrently")

        try:
            self._associate(name, principal_arn)
        except MutationError as e:
            if not entry_created:
                raise
            raise MutationError(
                f"access entry for {principal_arn} was created on cluster '{name}' but the policy association "
                f"failed, leaving the entry without {self.config.policy_arn} "
                f"(set EKS_ACCESS_REPAIR_EXISTING=true and re-run, or associate it manually): {e}",
                cluster_name=name,
                entry_created=True,
                context=e.context,
            ) from e

    def _ensure_policy(self, name: str, principal_arn: str) -> None:
        associated = self.backend.list_associated_policies(name, principal_arn)
        if self.config.policy_arn not in associated:
            logger.info(f"Repairing access entry for {principal_arn} on cluster '{name}': policy not associated")
            self._associate(name, principal_arn)

    def _associate(self, name: str, principal_arn: str) -> None:
        association = AccessPolicyAssociation(
            cluster_name=name,
            principal_arn=principal_arn,
            policy_arn=self.config.policy_arn,
            access_scope=self.config.access_scope,
        )
        self.backend.associate_policy(
            association.cluster_name,
            association.principal_arn,
            association.policy_arn,
            association.access_scope,
        )

    def _build_signal(self, principal_arn: str, outcomes: List[ClusterOutcome]) -> CompletionSignal:
        data: Dict[str, Any] = {"PrincipalArn": principal_arn}
        for status in ClusterStatus:
            data[status.value] = ",".join(o.name for o in outcomes if o.status is status)
        logger.debug(f"Reconciliation payload: {data}")

        failures = [o for o in outcomes if o.status in _FAILING]
        if failures:
            reason = f"Access entry reconciliation failed on {len(failures)} cluster(s): " + "; ".join(
                o.message or o.name for o in failures
            )
            return CompletionSignal.failed(reason, data)
        return CompletionSignal.success(data)
