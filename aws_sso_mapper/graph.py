"""Explicit record of the resources a mapper has emitted."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Optional, Tuple

from aws_cdk import aws_sso as sso
from aws_cdk import custom_resources as cr

if TYPE_CHECKING:
    from aws_sso_mapper.permission_set import PermissionSet

AssignmentKey = Tuple[str, str, str, str]


@dataclass
class SsoResourceGraph:
    """
    Permission sets, principal lookups and assignments under one mapper.

    Assignment keys are ``(permission set id, principal type, principal name,
    target id)``; lookup keys are ``(principal type, principal name)``.
    """

    instance_lookup: Optional[cr.AwsCustomResource] = None
    permission_sets: Dict[str, "PermissionSet"] = field(default_factory=dict)
    lookups: Dict[Tuple[str, str], cr.AwsCustomResource] = field(default_factory=dict)
    assignments: Dict[AssignmentKey, sso.CfnAssignment] = field(default_factory=dict)

    def add_permission_set(self, construct_id: str, permission_set: "PermissionSet") -> None:
        self.permission_sets[construct_id] = permission_set

    def add_lookup(self, principal_type: str, name: str, resource: cr.AwsCustomResource) -> None:
        self.lookups[(principal_type, name)] = resource

    def add_assignment(self, key: AssignmentKey, assignment: sso.CfnAssignment) -> None:
        self.assignments[key] = assignment

    def summary(self) -> Dict[str, int]:
        return {
            "permission_sets": len(self.permission_sets),
            "lookups": len(self.lookups),
            "assignments": len(self.assignments),
        }
