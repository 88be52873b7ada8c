"""
Permission set construct and its account assignments.
"""

import logging
from typing import Dict, Optional, Tuple, Union

from aws_cdk import aws_sso as sso
from constructs import Construct

from aws_sso_mapper.exceptions import DuplicateAssignmentError
from aws_sso_mapper.graph import SsoResourceGraph
from aws_sso_mapper.instance import InstanceContext
from aws_sso_mapper.principal import PrincipalResolver, construct_safe
from aws_sso_mapper.props import AssignProps, PermissionSetProps, PrincipalType, TargetType
from aws_sso_mapper.values import Deferred, Value, render

logger = logging.getLogger(__name__)


def assignment_construct_id(props: AssignProps) -> str:
    """Construct id of an assignment, unique per principal type, name and target."""
    return f"{props.type.value}-{construct_safe(props.name)}-{props.target_id}"


class PermissionSet(Construct):
    """
    An ``AWS::SSO::PermissionSet`` and the assignments made from it.

    Args:
        scope: Parent construct.
        construct_id: Scope-unique id.
        props: The permission set properties.
        context: Instance ARN and identity store id to create the set in.
        principals: Shared principal lookups. A private resolver is created
            under this construct when omitted.
        graph: Record of emitted resources, when owned by a mapper.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        props: PermissionSetProps,
        context: InstanceContext,
        principals: Optional[PrincipalResolver] = None,
        graph: Optional[SsoResourceGraph] = None,
    ) -> None:
        super().__init__(scope, construct_id)

        self.props = props
        self.context = context
        self.graph = graph
        self.principals = principals or PrincipalResolver(
            self, "Principals", context=context, graph=graph
        )
        self.assignments: Dict[str, Tuple[AssignProps, sso.CfnAssignment]] = {}

        self.resource = sso.CfnPermissionSet(
            self,
            "PermissionSet",
            instance_arn=render(context.instance_arn),
            name=props.name,
            description=props.resolved_description,
            session_duration=props.session_duration_iso(),
            inline_policy=props.inline_policy_json(),
            managed_policies=props.managed_policy_arns(),
            customer_managed_policy_references=props.customer_managed_policy_properties(),
            permissions_boundary=props.permissions_boundary_property(),
            relay_state_type=props.relay_state,
            tags=props.cfn_tags(),
        )
        self.permission_set_arn: Value = Deferred(self.resource.get_att("PermissionSetArn"))

        if graph is not None:
            graph.add_permission_set(construct_id, self)
        logger.debug(
            "Added permission set '%s' with %d managed policies",
            props.name,
            len(props.managed_policies),
        )

    def assign(
        self,
        props: Optional[AssignProps] = None,
        *,
        name: Optional[str] = None,
        type: Union[PrincipalType, str, None] = None,
        target_id: Optional[str] = None,
    ) -> sso.CfnAssignment:
        """
        Assign a principal to an AWS account with this permission set.

        Accepts either an ``AssignProps`` or its fields as keywords.

        Returns:
            The ``AWS::SSO::Assignment`` resource.

        Raises:
            DuplicateAssignmentError: if the same principal is already assigned
                to the target through this permission set.
            ValidationError: if ``target_id`` is not a literal 12 digit account id.
        """
        if props is None:
            props = AssignProps(name=name, type=type, target_id=target_id)

        assignment_id = assignment_construct_id(props)
        if assignment_id in self.assignments:
            existing, _ = self.assignments[assignment_id]
            raise DuplicateAssignmentError(
                f"{self.node.path}/{assignment_id}",
                existing=_describe(existing),
                requested=_describe(props),
            )

        principal_id = self.principals.principal_id(props.type, props.name)
        assignment = sso.CfnAssignment(
            self,
            assignment_id,
            instance_arn=render(self.context.instance_arn),
            permission_set_arn=render(self.permission_set_arn),
            principal_type=props.type.value,
            target_type=TargetType.AWS_ACCOUNT.value,
            target_id=props.target_id,
            principal_id=render(principal_id),
        )
        self.assignments[assignment_id] = (props, assignment)

        if self.graph is not None:
            self.graph.add_assignment((self.node.id,) + props.key, assignment)
        logger.debug(
            "Assigned %s '%s' to %s via '%s'",
            props.type.value,
            props.name,
            props.target_id,
            self.props.name,
        )
        return assignment


def _describe(props: AssignProps) -> str:
    return f"{props.type.value} '{props.name}' -> {props.target_id}"
