"""AWS Lambda entry point for the access-entry custom resource.

Parses the CloudFormation event, runs the reconciler and delivers exactly one
completion signal to the event's ResponseURL, whatever happens in between.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from ..backends import ClusterAccessBackend, EksClusterAccessBackend
from ..config import ReconcilerConfig
from ..domain import CompletionSignal, InvocationEnvelope, RequestType
from ..exceptions import InputError, TransportError
from ..services import AccessEntryReconciler, CompletionClient, InvocationBudget

# Configure logging
log_level = os.environ.get('LOG_LEVEL', 'INFO').upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class CustomResourceHandler:
    """Custom resource event handler.

    Args:
        config: Reconciler settings (read from the environment when None)
        backend: Cluster access backend (boto3 EKS backend when None)
        completion_client: Response delivery client
    """

    def __init__(
        self,
        config: Optional[ReconcilerConfig] = None,
        backend: Optional[ClusterAccessBackend] = None,
        completion_client: Optional[CompletionClient] = None,
    ):
        self.config = config or ReconcilerConfig.from_environment()
        self.config.validate_or_raise()
        self.backend = backend or EksClusterAccessBackend(region=self.config.region)
        self.reconciler = AccessEntryReconciler(self.backend, self.config)
        self.completion_client = completion_client or CompletionClient(
            timeout=self.config.callback_timeout_seconds,
            max_attempts=self.config.callback_max_attempts,
        )

    def handle_event(self, event: Dict[str, Any], context: Any) -> Dict[str, Any]:
        """Handle one custom resource event.

        Args:
            event: CloudFormation custom resource event
            context: AWS Lambda context

        Returns:
            Summary of the signal (Status, Reason, Data) plus ``Delivered``
        """
        try:
            envelope = InvocationEnvelope.from_event(event)
        except InputError as e:
            logger.error(f"Cannot parse custom resource event: {e}")
            envelope = self._fallback_envelope(event)
            return self._complete(envelope, CompletionSignal.failed(str(e)), context)

        logger.info(f"Custom resource request: {json.dumps(envelope.describe(), default=str)}")

        if not envelope.response_url:
            # Without a ResponseURL the outcome would be invisible, so nothing is mutated
            logger.error("Custom resource event has no ResponseURL; no completion signal can be sent")
            return {**CompletionSignal.failed("missing ResponseURL").to_dict(), "Delivered": False}

        try:
            budget = InvocationBudget.from_context(context, self.config)
            signal = self.reconciler.reconcile(envelope, budget)
        except Exception as e:
            logger.error(f"Reconciler raised unexpectedly: {e}", exc_info=True)
            signal = CompletionSignal.failed(f"Reconciliation failed: {e}")

        return self._complete(envelope, signal, context)

    def _complete(self, envelope: InvocationEnvelope, signal: CompletionSignal, context: Any) -> Dict[str, Any]:
        delivered = False
        if envelope.response_url:
            try:
                self.completion_client.send_completion(envelope, signal, context)
                delivered = True
            except TransportError as e:
                logger.error(f"Completion signal not delivered; the stack will wait for a timeout: {e}")
        return {**signal.to_dict(), "Delivered": delivered}

    @staticmethod
    def _fallback_envelope(event: Any) -> InvocationEnvelope:
        """Envelope holding only the addressing fields of a malformed event."""
        fields = event if isinstance(event, dict) else {}
        return InvocationEnvelope(
            request_type=RequestType.NONE,
            response_url=fields.get("ResponseURL"),
            stack_id=fields.get("StackId"),
            request_id=fields.get("RequestId"),
            logical_resource_id=fields.get("LogicalResourceId"),
            physical_resource_id=fields.get("PhysicalResourceId"),
        )


# Global handler instance for Lambda
_handler_instance: Optional[CustomResourceHandler] = None


def get_handler() -> CustomResourceHandler:
    """Get or create the handler instance reused across warm invocations."""
    global _handler_instance
    if _handler_instance is None:
        _handler_instance = CustomResourceHandler()
    return _handler_instance


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """AWS Lambda entry point.

    Any failure building the handler (e.g. invalid configuration) is still
    reported to CloudFormation as FAILED.
    """
    try:
        instance = get_handler()
    except Exception as e:
        logger.error(f"Handler initialisation failed: {e}", exc_info=True)
        envelope = CustomResourceHandler._fallback_envelope(event)
        signal = CompletionSignal.failed(f"Handler initialisation failed: {e}")
        delivered = False
        if envelope.response_url:
            try:
                CompletionClient().send_completion(envelope, signal, context)
                delivered = True
            except TransportError as transport_error:
                logger.error(f"Completion signal not delivered: {transport_error}")
        return {**signal.to_dict(), "Delivered": delivered}
    return instance.handle_event(event, context)
