"""Reconciler and completion services."""

from .completion_client import CompletionClient, build_response_body
from .reconciler import AccessEntryReconciler, ClusterOutcome, ClusterStatus, InvocationBudget

__all__ = [
    "AccessEntryReconciler",
    "ClusterOutcome",
    "ClusterStatus",
    "CompletionClient",
    "InvocationBudget",
    "build_response_body",
]
