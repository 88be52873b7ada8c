"""
Discovery of the IAM Identity Center (SSO) instance at deployment time.
"""

import logging
from dataclasses import dataclass

from aws_cdk import aws_iam as iam
from aws_cdk import custom_resources as cr
from constructs import Construct

from aws_sso_mapper.exceptions import ValidationError
from aws_sso_mapper.values import Deferred, Value, wrap

logger = logging.getLogger(__name__)

INSTANCE_ARN_FIELD = "Instances.0.InstanceArn"
IDENTITY_STORE_ID_FIELD = "Instances.0.IdentityStoreId"
INSTANCE_PHYSICAL_ID = "aws-sso-instance-id"


@dataclass(frozen=True)
class InstanceContext:
    """SSO instance ARN and identity store id shared by every builder in a scope."""

    instance_arn: Value
    identity_store_id: Value

    @classmethod
    def from_literals(cls, instance_arn: str, identity_store_id: str) -> "InstanceContext":
        if not instance_arn or not identity_store_id:
            raise ValidationError(
                "instance_arn", "instance_arn and identity_store_id must be given together"
            )
        return cls(wrap(instance_arn), wrap(identity_store_id))


class SsoInstanceResolver(Construct):
    """
    Looks up the SSO instance with ``SSOAdmin.listInstances``.

    The call runs on create and again on every update. When the account has
    no SSO instance the response carries no ``Instances.0.*`` attributes and
    CloudFormation fails the ``Fn::GetAtt`` of every consumer, which fails
    the deployment.
    """

    def __init__(self, scope: Construct, construct_id: str) -> None:
        super().__init__(scope, construct_id)

        call = cr.AwsSdkCall(
            service="SSOAdmin",
            action="listInstances",
            physical_resource_id=cr.PhysicalResourceId.of(INSTANCE_PHYSICAL_ID),
            output_paths=[INSTANCE_ARN_FIELD, IDENTITY_STORE_ID_FIELD],
        )
        self.lookup = cr.AwsCustomResource(
            self,
            "GetInstanceId",
            install_latest_aws_sdk=False,
            on_create=call,
            on_update=call,
            # listInstances is authorised under the "sso" prefix, not "ssoadmin"
            policy=cr.AwsCustomResourcePolicy.from_statements([
                iam.PolicyStatement(
                    effect=iam.Effect.ALLOW,
                    actions=["sso:List*"],
                    resources=["*"],
                )
            ]),
        )

        self.context = InstanceContext(
            instance_arn=Deferred(self.lookup.get_response_field_reference(INSTANCE_ARN_FIELD)),
            identity_store_id=Deferred(
                self.lookup.get_response_field_reference(IDENTITY_STORE_ID_FIELD)
            ),
        )
        logger.debug("Added SSO instance lookup %s", self.node.path)

    @property
    def instance_arn(self) -> Value:
        return self.context.instance_arn

    @property
    def identity_store_id(self) -> Value:
        return self.context.identity_store_id
