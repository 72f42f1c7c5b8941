"""AWS EKS access-entry operations utilities.

Thin wrappers around the EKS API calls the reconciler needs:
- Cluster listing with ``nextToken`` pagination
- Cluster description
- Access entry listing with pagination
- Access entry creation
- Access policy association and listing

Every wrapper takes the client as its first argument so tests can inject a
mock, and translates ``botocore`` errors into ``EksError`` with the AWS error
code preserved.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


class EksError(Exception):
    """Custom exception for EKS-related errors.

    Attributes:
        error_code: AWS error code (e.g. ``ResourceNotFoundException``), if any
    """

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.error_code = error_code

    @property
    def already_exists(self) -> bool:
        return self.error_code == "ResourceInUseException"


def _call(operation: str, func: Callable[..., Dict[str, Any]], **params: Any) -> Dict[str, Any]:
    try:
        return func(**params)
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code")
        if error_code == "AccessDeniedException":
            raise EksError(f"Access denied calling {operation}. Check the execution role permissions.", error_code) from e
        raise EksError(f"{operation} failed: {e}", error_code) from e
    except BotoCoreError as e:
        raise EksError(f"{operation} failed: {e}") from e


def _paginate(
    operation: str,
    func: Callable[..., Dict[str, Any]],
    result_key: str,
    **params: Any,
) -> Iterator[Any]:
    next_token: Optional[str] = None
    while True:
        page_params = dict(params)
        if next_token:
            page_params["nextToken"] = next_token
        response = _call(operation, func, **page_params)
        yield from response.get(result_key, [])
        next_token = response.get("nextToken")
        if not next_token:
            break


def list_clusters(client: Any, max_results: int = 100) -> List[str]:
    """List every cluster name visible to the client's credentials.

    Args:
        client: EKS client instance
        max_results: Page size for each ``list_clusters`` call

    Raises:
        EksError: When any page fails

    Examples:
        >>> names = list_clusters(eks_client)
    """
    names = list(_paginate("ListClusters", client.list_clusters, "clusters", maxResults=max_results))
    logger.debug(f"Discovered {len(names)} clusters")
    return names


def describe_cluster(client: Any, name: str) -> Dict[str, Any]:
    """Return the ``cluster`` object for one cluster.

    Raises:
        EksError: When the cluster cannot be described
    """
    response = _call("DescribeCluster", client.describe_cluster, name=name)
    return response.get("cluster", {})


def list_access_entries(client: Any, cluster_name: str, max_results: int = 100) -> List[str]:
    """List the principal ARNs holding access entries on a cluster.

    Raises:
        EksError: When any page fails
    """
    return list(
        _paginate(
            "ListAccessEntries",
            client.list_access_entries,
            "accessEntries",
            clusterName=cluster_name,
            maxResults=max_results,
        )
    )


def create_access_entry(client: Any, cluster_name: str, principal_arn: str, entry_type: str = "STANDARD") -> Dict[str, Any]:
    """Create an access entry for a principal.

    Raises:
        EksError: When creation fails; ``already_exists`` is True when the
            entry was created concurrently
    """
    response = _call(
        "CreateAccessEntry",
        client.create_access_entry,
        clusterName=cluster_name,
        principalArn=principal_arn,
        type=entry_type,
    )
    return response.get("accessEntry", {})


def associate_access_policy(
    client: Any,
    cluster_name: str,
    principal_arn: str,
    policy_arn: str,
    access_scope: Dict[str, Any],
) -> Dict[str, Any]:
    """Associate an access policy with a principal's access entry.

    Raises:
        EksError: When the association fails
    """
    return _call(
        "AssociateAccessPolicy",
        client.associate_access_policy,
        clusterName=cluster_name,
        principalArn=principal_arn,
        policyArn=policy_arn,
        accessScope=access_scope,
    )


def list_associated_access_policies(client: Any, cluster_name: str, principal_arn: str) -> List[str]:
    """List the policy ARNs associated with a principal's access entry.

    Raises:
        EksError: When any page fails
    """
    policies = _paginate(
        "ListAssociatedAccessPolicies",
        client.list_associated_access_policies,
        "associatedAccessPolicies",
        clusterName=cluster_name,
        principalArn=principal_arn,
    )
    return [policy.get("policyArn") for policy in policies if policy.get("policyArn")]
