"""Completion-callback client for CloudFormation custom resources.

Serialises a CompletionSignal into the custom resource response document and
PUTs it to the pre-signed ``ResponseURL`` of the invocation. This is the only
channel the calling stack observes: a response that never arrives leaves the
stack waiting until CloudFormation times the resource out.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Dict, Optional

import requests

from ..constants import DEFAULT_CALLBACK_MAX_ATTEMPTS, DEFAULT_CALLBACK_TIMEOUT_SECONDS, MAX_RESPONSE_BYTES
from ..domain import CompletionSignal, CompletionStatus, InvocationEnvelope
from ..exceptions import TransportError

logger = logging.getLogger(__name__)

_TRUNCATION_MARKER = "... (truncated)"


def _log_stream_name(context: Any) -> Optional[str]:
    return getattr(context, "log_stream_name", None) if context is not None else None


def _remaining_seconds(context: Any) -> Optional[float]:
    get_remaining = getattr(context, "get_remaining_time_in_millis", None)
    if not callable(get_remaining):
        return None
    try:
        return get_remaining() / 1000.0
    except (TypeError, ValueError):
        return None


def build_response_body(
    envelope: InvocationEnvelope,
    signal: CompletionSignal,
    context: Any = None,
    max_bytes: int = MAX_RESPONSE_BYTES,
) -> Dict[str, Any]:
    """Build the custom resource response document.

    Args:
        envelope: Invocation the response answers
        signal: Outcome to report
        context: Lambda context, used for the log stream name
        max_bytes: Size limit of the serialised document

    Returns:
        Response document; Data keys are dropped (largest first), then the
        reason truncated, until it fits ``max_bytes``
    """
    log_stream = _log_stream_name(context)

    reason = signal.reason
    if not reason and signal.status is CompletionStatus.FAILED:
        reason = f"See the details in CloudWatch Log Stream: {log_stream or 'unknown'}"
    elif reason and log_stream and signal.status is CompletionStatus.FAILED:
        reason = f"{reason} (log stream: {log_stream})"

    body: Dict[str, Any] = {
        "Status": signal.status.value,
        "Reason": reason or "",
        "PhysicalResourceId": envelope.physical_resource_id or log_stream or envelope.logical_resource_id,
        "StackId": envelope.stack_id,
        "RequestId": envelope.request_id,
        "LogicalResourceId": envelope.logical_resource_id,
        "NoEcho": False,
        "Data": dict(signal.data),
    }

    _shrink_data(body, max_bytes)
    _truncate_reason(body, max_bytes)
    return body


def _serialised_size(body: Dict[str, Any]) -> int:
    return len(json.dumps(body).encode("utf-8"))


def _shrink_data(body: Dict[str, Any], max_bytes: int) -> None:
    """Drop Data keys, largest first, until the document fits."""
    data = body["Data"]
    by_size = sorted(data, key=lambda key: len(json.dumps(data[key])), reverse=True)
    for key in by_size:
        if _serialised_size(body) <= max_bytes:
            return
        del data[key]
        logger.warning(f"Completion data key {key} dropped to fit the response size limit")


def _truncate_reason(body: Dict[str, Any], max_bytes: int) -> None:
    reason = body["Reason"]
    overflow = _serialised_size(body) - max_bytes
    keep = len(reason)
    # Escaped characters take several bytes, so a single cut can fall short
    while overflow > 0 and keep > 0:
        keep = max(0, keep - overflow - len(_TRUNCATION_MARKER))
        body["Reason"] = reason[:keep] + _TRUNCATION_MARKER
        overflow = _serialised_size(body) - max_bytes
    if body["Reason"] != reason:
        logger.warning("Completion reason truncated to fit the response size limit")


class CompletionClient:
    """Delivers completion signals to the invocation's response URL.

    Delivery is retried on connection errors and 5xx responses, with
    exponential backoff (1s, 2s, ...), as long as the Lambda context has time
    left for another attempt. 4xx responses are terminal: the pre-signed URL
    is expired or the document was rejected.
    """

    def __init__(
        self,
        http_session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_CALLBACK_TIMEOUT_SECONDS,
        max_attempts: int = DEFAULT_CALLBACK_MAX_ATTEMPTS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.session = http_session or requests.Session()
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self._sleep = sleep

    def send_completion(self, envelope: InvocationEnvelope, signal: CompletionSignal, context: Any = None) -> None:
        """Send ``signal`` for ``envelope``.

        Raises:
            TransportError: When the envelope has no response URL or every
                delivery attempt failed
        """
        if not envelope.response_url:
            raise TransportError("Invocation has no ResponseURL to deliver the completion signal to")

        body = json.dumps(build_response_body(envelope, signal, context))
        headers = {"content-type": "", "content-length": str(len(body.encode("utf-8")))}
        logger.info(f"Sending {signal.status.value} completion for request {envelope.request_id}")
        logger.debug(f"Completion body: {body}")

        last_error: Optional[str] = None
        status_code: Optional[int] = None
        for attempt in range(self.max_attempts):
            timeout = self._attempt_timeout(context)
            try:
                response = self.session.put(envelope.response_url, data=body, headers=headers, timeout=timeout)
            except requests.RequestException as e:
                last_error = f"{type(e).__name__}: {e}"
                status_code = None
            else:
                status_code = response.status_code
                if status_code < 300:
                    logger.info(f"Completion delivered (HTTP {status_code})")
                    return
                last_error = f"HTTP {status_code}: {response.text[:200]}"
                if status_code < 500:
                    break

            if attempt + 1 >= self.max_attempts:
                break
            delay = 2**attempt
            if not self._has_time_for_retry(context, delay):
                logger.warning("Not enough time left in the invocation for another delivery attempt")
                break
            logger.warning(f"Completion delivery attempt {attempt + 1} failed, retrying in {delay}s: {last_error}")
            self._sleep(delay)

        logger.error(f"Failed to deliver completion signal for request {envelope.request_id}: {last_error}")
        raise TransportError(
            f"Failed to deliver completion signal: {last_error}",
            status_code=status_code,
            context={"request_id": envelope.request_id, "stack_id": envelope.stack_id},
        )

    def _attempt_timeout(self, context: Any) -> float:
        remaining = _remaining_seconds(context)
        if remaining is None:
            return self.timeout
        return max(1.0, min(self.timeout, remaining - 0.5))

    def _has_time_for_retry(self, context: Any, delay: float) -> bool:
        remaining = _remaining_seconds(context)
        if remaining is None:
            return True
        return remaining > delay + 1.0
