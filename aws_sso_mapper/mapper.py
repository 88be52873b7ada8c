"""
Root construct tying the instance lookup, principal lookups and permission
sets together.
"""

import logging
from typing import Optional

from constructs import Construct

from aws_sso_mapper.exceptions import ValidationError
from aws_sso_mapper.graph import SsoResourceGraph
from aws_sso_mapper.instance import InstanceContext, SsoInstanceResolver
from aws_sso_mapper.permission_set import PermissionSet
from aws_sso_mapper.principal import PrincipalResolver
from aws_sso_mapper.props import PermissionSetProps
from aws_sso_mapper.values import Value

logger = logging.getLogger(__name__)

# Child ids the mapper creates for itself
RESERVED_IDS = ("Instance", "Principals")


class AwsSsoMapper(Construct):
    """
    Maps permission sets and principals onto AWS accounts.

    The SSO instance is discovered with a ``listInstances`` custom resource
    unless both ``instance_arn`` and ``identity_store_id`` are given.

    Example::

        mapper = AwsSsoMapper(stack, "Sso")
        read_only = mapper.add_permission_set(
            "ReadOnly",
            PermissionSetProps(
                name="ReadOnly",
                managed_policies=[
                    iam.ManagedPolicy.from_aws_managed_policy_name("ReadOnlyAccess")
                ],
            ),
        )
        read_only.assign(AssignProps("alice", PrincipalType.USER, "111111111111"))
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        instance_arn: Optional[str] = None,
        identity_store_id: Optional[str] = None,
    ) -> None:
        super().__init__(scope, construct_id)

        self.graph = SsoResourceGraph()

        if instance_arn is None and identity_store_id is None:
            self.resolver: Optional[SsoInstanceResolver] = SsoInstanceResolver(
                self, RESERVED_IDS[0]
            )
            self.context = self.resolver.context
            self.graph.instance_lookup = self.resolver.lookup
        elif instance_arn and identity_store_id:
            self.resolver = None
            self.context = InstanceContext.from_literals(instance_arn, identity_store_id)
            logger.info("Using SSO instance %s", instance_arn)
        else:
            raise ValidationError(
                "instance_arn", "instance_arn and identity_store_id must be given together"
            )

        self.principals = PrincipalResolver(
            self, RESERVED_IDS[1], context=self.context, graph=self.graph
        )

    @property
    def instance_arn(self) -> Value:
        return self.context.instance_arn

    @property
    def identity_store_id(self) -> Value:
        return self.context.identity_store_id

    def add_permission_set(self, construct_id: str, props: PermissionSetProps) -> PermissionSet:
        """
        Create a permission set in this mapper's SSO instance.

        Args:
            construct_id: Scope-unique id of the permission set construct.
            props: Permission set properties.

        Returns:
            The new ``PermissionSet``; call ``assign`` on it to map principals.
        """
        if construct_id in self.graph.permission_sets:
            raise ValidationError(
                "construct_id", f"permission set '{construct_id}' already exists"
            )
        if construct_id in RESERVED_IDS or self.node.try_find_child(construct_id) is not None:
            raise ValidationError(
                "construct_id", f"'{construct_id}' is reserved by the mapper"
            )
        return PermissionSet(
            self,
            construct_id,
            props=props,
            context=self.context,
            principals=self.principals,
            graph=self.graph,
        )
