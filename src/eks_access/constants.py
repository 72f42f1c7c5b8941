"""Default values shared across the reconciler, its config and the deploy stack."""

DEFAULT_POLICY_ARN = "arn:aws:eks::aws:cluster-access-policy/AmazonEKSClusterAdminPolicy"
DEFAULT_ACCESS_SCOPE_TYPE = "cluster"
DEFAULT_ENTRY_TYPE = "STANDARD"

ACCESS_SCOPE_TYPES = ("cluster", "namespace")
ACCESS_ENTRY_TYPES = ("STANDARD", "EC2_LINUX", "EC2_WINDOWS", "FARGATE_LINUX")

# Lambda timeout of the reconciler function, in seconds
DEFAULT_TIMEOUT_SECONDS = 60
# Slice of the budget kept back for delivering the completion signal
DEFAULT_CALLBACK_RESERVE_SECONDS = 5

DEFAULT_CALLBACK_TIMEOUT_SECONDS = 10
DEFAULT_CALLBACK_MAX_ATTEMPTS = 3

# CloudFormation rejects custom resource responses larger than this
MAX_RESPONSE_BYTES = 4096
