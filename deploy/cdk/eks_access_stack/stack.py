"""AWS CDK stack for the EKS dashboard access role and the access-entry reconciler."""

from __future__ import annotations

import os
from typing import Optional, Sequence

from aws_cdk import (
    CfnOutput,
    CustomResource,
    Duration,
    RemovalPolicy,
    Stack,
    aws_iam as iam,
    aws_lambda as _lambda,
    aws_logs as logs,
)
from constructs import Construct

from eks_access.constants import DEFAULT_CALLBACK_RESERVE_SECONDS, DEFAULT_POLICY_ARN, DEFAULT_TIMEOUT_SECONDS

DASHBOARD_READ_ACTIONS: Sequence[str] = (
    "eks:ListClusters",
    "eks:DescribeCluster",
    "eks:ListNodegroups",
    "eks:DescribeNodegroup",
    "eks:ListAddons",
    "eks:DescribeAddon",
    "eks:ListFargateProfiles",
    "cloudwatch:GetMetricData",
    "cloudwatch:GetMetricStatistics",
    "cloudwatch:ListMetrics",
    "sts:GetCallerIdentity",
)

RECONCILER_ACTIONS: Sequence[str] = (
    "eks:ListClusters",
    "eks:DescribeCluster",
    "eks:ListAccessEntries",
    "eks:CreateAccessEntry",
    "eks:AssociateAccessPolicy",
    "eks:ListAssociatedAccessPolicies",
)


class EksAccessStack(Stack):
    """Dashboard access role, plus the reconciler that whitelists it on every cluster.

    The reconciler Lambda code is taken from ``lambda_package_dir`` (default:
    ``LAMBDA_PACKAGE_DIR`` environment variable, then ``build/lambda``), which
    must hold the ``eks_access`` package and its dependencies.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        role_name: str,
        source_account_id: str,
        enable_access_entry: bool = False,
        policy_arn: str = DEFAULT_POLICY_ARN,
        lambda_package_dir: Optional[str] = None,
        lambda_timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
        log_level: str = "INFO",
        **kwargs,
    ) -> None:
        if not role_name:
            raise ValueError("role_name is required (cdk context: -c role_name=...)")
        if not source_account_id:
            raise ValueError("source_account_id is required (cdk context: -c source_account_id=<12-digit account id>)")

        super().__init__(scope, construct_id, **kwargs)

        read_policy = iam.ManagedPolicy(
            self,
            "EksAccessPolicy",
            managed_policy_name="cft-eks-access-policy",
            statements=[
                iam.PolicyStatement(
                    sid="EKSReadonlyAccess",
                    actions=list(DASHBOARD_READ_ACTIONS),
                    resources=["*"],
                )
            ],
        )

        self.access_role = iam.Role(
            self,
            "EksClusterRole",
            role_name=role_name,
            description="EKS access role",
            assumed_by=iam.CompositePrincipal(
                iam.AccountPrincipal(source_account_id),
                iam.ServicePrincipal("ec2.amazonaws.com"),
            ),
            managed_policies=[read_policy],
        )

        iam.CfnInstanceProfile(
            self,
            "EksDashboardInstanceProfile",
            roles=[self.access_role.role_name],
        )

        CfnOutput(self, "EksRoleArn", value=self.access_role.role_arn, description="ARN of the IAM role created for EKS access")

        self.reconciler_function: Optional[_lambda.Function] = None
        if enable_access_entry:
            self.reconciler_function = self._add_reconciler(
                policy_arn=policy_arn,
                lambda_package_dir=lambda_package_dir or os.environ.get("LAMBDA_PACKAGE_DIR", "build/lambda"),
                lambda_timeout_seconds=lambda_timeout_seconds,
                log_level=log_level,
            )

    def _add_reconciler(
        self,
        *,
        policy_arn: str,
        lambda_package_dir: str,
        lambda_timeout_seconds: int,
        log_level: str,
    ) -> _lambda.Function:
        lambda_role = iam.Role(
            self,
            "ClusterAccessLambdaRole",
            assumed_by=iam.ServicePrincipal("lambda.amazonaws.com"),
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name("service-role/AWSLambdaBasicExecutionRole"),
            ],
        )
        lambda_role.add_to_policy(
            iam.PolicyStatement(
                sid="AllowEKSAccessEntryUpdate",
                actions=list(RECONCILER_ACTIONS),
                resources=["*"],
            )
        )

        log_group = logs.LogGroup(
            self,
            "ClusterAccessLogGroup",
            retention=logs.RetentionDays.ONE_MONTH,
            removal_policy=RemovalPolicy.DESTROY,
        )

        function = _lambda.Function(
            self,
            "ClusterAccessHandler",
            function_name="EKSAccessEntryUpdater",
            runtime=_lambda.Runtime.PYTHON_3_11,
            handler="eks_access.handlers.lambda_handler.handler",
            code=_lambda.Code.from_asset(lambda_package_dir),
            role=lambda_role,
            timeout=Duration.seconds(lambda_timeout_seconds),
            memory_size=256,
            log_group=log_group,
            environment={
                "LOG_LEVEL": log_level,
                "EKS_ACCESS_POLICY_ARN": policy_arn,
                "EKS_ACCESS_TIMEOUT_SECONDS": str(lambda_timeout_seconds),
                "EKS_ACCESS_CALLBACK_RESERVE_SECONDS": str(DEFAULT_CALLBACK_RESERVE_SECONDS),
            },
        )

        CustomResource(
            self,
            "TriggerAccessEntry",
            service_token=function.function_arn,
            resource_type="Custom::ClusterAccessEntryTrigger",
            properties={"RoleArn": self.access_role.role_arn},
        )

        CfnOutput(self, "ReconcilerFunctionName", value=function.function_name)
        return function
