"""AWS session management utilities.

Creates the boto3 session and EKS client the reconciler backend uses. Inside
Lambda the execution role supplies credentials through the default chain.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError


logger = logging.getLogger(__name__)

# Keep SDK retries short; the whole invocation has a 60 second budget
_CLIENT_CONFIG = Config(retries={"max_attempts": 3, "mode": "standard"}, connect_timeout=5, read_timeout=15)


class SessionError(Exception):
    """Custom exception for session-related errors."""

    pass


def create_session(region: Optional[str] = None) -> boto3.Session:
    """Create an AWS session from the default credential chain.

    Args:
        region: AWS region for the session (falls back to ``AWS_REGION``/``AWS_DEFAULT_REGION``)

    Raises:
        SessionError: When the session cannot be created
    """
    logger.debug(f"Creating AWS session (region: {region or 'default'})")
    try:
        return boto3.Session(region_name=region)
    except BotoCoreError as e:
        raise SessionError(f"Failed to create AWS session: {e}") from e


def create_eks_client(session: boto3.Session, region: Optional[str] = None) -> Any:
    """Create an EKS client from a boto3 session.

    Args:
        session: A boto3 session
        region: AWS region for the client (overrides session region)
    """
    if region:
        return session.client("eks", region_name=region, config=_CLIENT_CONFIG)
    return session.client("eks", config=_CLIENT_CONFIG)
