"""
Stack that synthesizes an SSO mapping document into permission sets and
account assignments.
"""

import logging
from typing import Any

from aws_cdk import CfnOutput, Stack, Tags
from constructs import Construct

from aws_sso_mapper import AwsSsoMapper, MapperConfig
from aws_sso_mapper.values import render

logger = logging.getLogger(__name__)


class SsoMapperStack(Stack):
    """
    Stack for IAM Identity Center permission sets and assignments.

    This stack creates:
    - An SSO instance lookup (unless the instance is given in the config)
    - One permission set per entry of the mapping document
    - Identity Store lookups for every assigned user and group
    - One account assignment per principal and target account
    - CloudFormation outputs with the instance and permission set ARNs
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: MapperConfig,
        **kwargs: Any
    ) -> None:
        """
        Initialize the SSO mapper stack.

        Args:
            scope: CDK construct scope
            construct_id: Unique identifier for this stack
            config: Parsed mapping document
            **kwargs: Additional stack properties
        """
        super().__init__(scope, construct_id, **kwargs)

        self.config = config
        self.mapper = AwsSsoMapper(
            self,
            "SsoMapper",
            instance_arn=config.instance_arn,
            identity_store_id=config.identity_store_id,
        )

        self._create_permission_sets()
        self._create_outputs()
        self._apply_tags()

        logger.info("Synthesized %s: %s", construct_id, self.mapper.graph.summary())

    def _create_permission_sets(self) -> None:
        """Create every permission set and its assignments."""
        for entry in self.config.permission_sets:
            permission_set = self.mapper.add_permission_set(entry.id, entry.props)
            for assignment in entry.assignments:
                for props in assignment.to_props():
                    permission_set.assign(props)

    def _create_outputs(self) -> None:
        """Create CloudFormation outputs for the instance and permission sets."""
        CfnOutput(
            self, "InstanceArn",
            value=render(self.mapper.instance_arn),
            description="IAM Identity Center instance ARN",
        )

        CfnOutput(
            self, "IdentityStoreId",
            value=render(self.mapper.identity_store_id),
            description="IAM Identity Center identity store id",
        )

        for construct_id, permission_set in self.mapper.graph.permission_sets.items():
            CfnOutput(
                self, f"PermissionSet{construct_id}Arn",
                value=render(permission_set.permission_set_arn),
                description=f"ARN of permission set {permission_set.props.name}",
            )

    def _apply_tags(self) -> None:
        """Apply common tags to all resources."""
        Tags.of(self).add("Component", "IdentityCenter")
        for key, value in self.config.tags.items():
            Tags.of(self).add(key, value)
