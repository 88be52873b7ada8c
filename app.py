#!/usr/bin/env python3
"""
AWS CDK application for IAM Identity Center (AWS SSO) permission mapping.

This application creates:
- A lookup of the SSO instance ARN and identity store id
- Permission sets with inline, AWS managed and customer managed policies
- Identity Store lookups resolving user and group names to principal ids
- Account assignments linking permission sets, principals and accounts

Configuration is read from CDK context and environment variables:
- sso_mapper / sso_mapper_config (SSO_MAPPER_CONFIG): mapping document
- instance_arn, identity_store_id: skip the instance lookup
- enable_nag: run cdk-nag AwsSolutions checks (default true)
- LOG_LEVEL: synthesis log level (default INFO)
"""

import logging
import os

from aws_cdk import App, Aspects, Environment, Tags
from cdk_nag import AwsSolutionsChecks, NagSuppressions

from aws_sso_mapper import load_config
from stacks.sso_mapper_stack import SsoMapperStack


def main() -> None:
    """
    Main application entry point.

    Loads the mapping document and synthesizes the SSO mapper stack.
    """
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = App()

    account = app.node.try_get_context("account") or os.environ.get("CDK_DEFAULT_ACCOUNT")
    region = app.node.try_get_context("region") or os.environ.get("CDK_DEFAULT_REGION", "us-east-1")
    stack_name = app.node.try_get_context("stack_name") or "SsoMapperStack"

    config = load_config(app.node)

    stack = SsoMapperStack(
        app,
        stack_name,
        config=config,
        env=Environment(account=account, region=region),
        description="IAM Identity Center permission sets and account assignments",
    )

    Tags.of(app).add("Project", "AwsSsoMapper")
    Tags.of(app).add("ManagedBy", "CDK")

    if config.enable_nag:
        Aspects.of(app).add(AwsSolutionsChecks(verbose=True))
        NagSuppressions.add_stack_suppressions(
            stack,
            [
                {
                    "id": "AwsSolutions-IAM4",
                    "reason": "The custom resource provider function uses the AWS managed basic execution role",
                },
                {
                    "id": "AwsSolutions-IAM5",
                    "reason": "SSO and Identity Store list calls do not support resource level permissions",
                },
                {
                    "id": "AwsSolutions-L1",
                    "reason": "The custom resource provider runtime is managed by aws-cdk-lib",
                },
            ],
        )

    app.synth()


if __name__ == "__main__":
    main()
