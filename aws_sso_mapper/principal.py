"""
Identity Store lookups that turn a user or group name into its principal id.
"""

import hashlib
import logging
import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from aws_cdk import custom_resources as cr
from constructs import Construct

from aws_sso_mapper.graph import SsoResourceGraph
from aws_sso_mapper.instance import InstanceContext
from aws_sso_mapper.props import PrincipalType
from aws_sso_mapper.values import Deferred, render

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LookupPath:
    """How a principal type is searched for in the Identity Store."""

    action: str
    attribute_path: str
    response_field: str
    construct_prefix: str


LOOKUP_PATHS: Dict[PrincipalType, LookupPath] = {
    PrincipalType.USER: LookupPath(
        action="listUsers",
        attribute_path="UserName",
        response_field="Users.0.UserId",
        construct_prefix="GetUserId",
    ),
    PrincipalType.GROUP: LookupPath(
        action="listGroups",
        attribute_path="DisplayName",
        response_field="Groups.0.GroupId",
        construct_prefix="GetGroupId",
    ),
}


def construct_safe(value: str) -> str:
    """
    Make ``value`` usable inside a construct id.

    Characters outside the allowed set are replaced and a short digest of the
    original value is appended, so two names that differ only in replaced
    characters still map to different ids.
    """
    safe = re.sub(r"[^A-Za-z0-9_.@+=,-]", "_", value)
    if safe != value:
        digest = hashlib.sha256(value.encode("utf-8")).hexdigest()[:8]
        safe = f"{safe}-{digest}"
    return safe


class PrincipalResolver(Construct):
    """
    Creates at most one Identity Store lookup per principal.

    Every permission set that assigns the same user or group shares the
    lookup, so the ``listUsers``/``listGroups`` call runs once per deployment.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        context: InstanceContext,
        graph: Optional[SsoResourceGraph] = None,
    ) -> None:
        super().__init__(scope, construct_id)
        self.context = context
        self.graph = graph
        self.lookups: Dict[Tuple[PrincipalType, str], cr.AwsCustomResource] = {}

    def lookup(self, principal_type: PrincipalType, name: str) -> cr.AwsCustomResource:
        """Return the custom resource resolving ``name``, creating it on first use."""
        principal_type = PrincipalType(principal_type)
        key = (principal_type, name)
        if key in self.lookups:
            return self.lookups[key]

        path = LOOKUP_PATHS[principal_type]
        call = cr.AwsSdkCall(
            service="IdentityStore",
            action=path.action,
            physical_resource_id=cr.PhysicalResourceId.of(name),
            parameters={
                "IdentityStoreId": render(self.context.identity_store_id),
                "Filters": [
                    {
                        "AttributePath": path.attribute_path,
                        "AttributeValue": name,
                    }
                ],
            },
            output_paths=[path.response_field],
        )
        resource = cr.AwsCustomResource(
            self,
            f"{path.construct_prefix}-{construct_safe(name)}",
            on_create=call,
            on_update=call,
            policy=cr.AwsCustomResourcePolicy.from_sdk_calls(
                resources=cr.AwsCustomResourcePolicy.ANY_RESOURCE
            ),
        )
        self.lookups[key] = resource
        if self.graph is not None:
            self.graph.add_lookup(principal_type.value, name, resource)
        logger.debug("Added %s lookup for %s '%s'", path.action, principal_type.value, name)
        return resource

    def principal_id(self, principal_type: PrincipalType, name: str) -> Deferred:
        """The principal id of ``name``, read from the first match of the lookup."""
        path = LOOKUP_PATHS[PrincipalType(principal_type)]
        resource = self.lookup(principal_type, name)
        return Deferred(resource.get_response_field_reference(path.response_field))
