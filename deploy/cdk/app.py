#!/usr/bin/env python3
"""CDK app for the EKS access stack.

Usage:
    cdk deploy -c role_name=eks-dashboard -c source_account_id=123456789012 -c enable_access_entry=true
"""

import aws_cdk as cdk

from eks_access_stack import EksAccessStack

app = cdk.App()

EksAccessStack(
    app,
    app.node.try_get_context("stack_name") or "EksAccessStack",
    role_name=app.node.try_get_context("role_name") or "eks-dashboard-access",
    source_account_id=app.node.try_get_context("source_account_id"),
    enable_access_entry=str(app.node.try_get_context("enable_access_entry") or "false").lower() == "true",
    lambda_package_dir=app.node.try_get_context("lambda_package_dir"),
)

app.synth()
