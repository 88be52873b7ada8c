"""
Property types for permission sets and account assignments.

Literal values are validated when the props are constructed so that a bad
mapping fails during ``cdk synth`` rather than half way through a deployment.
Unresolved CDK tokens are passed through unchecked, except for assignment
target ids, which become part of construct ids and must be literal.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Union

import aws_cdk as cdk
from aws_cdk import aws_iam as iam
from aws_cdk import aws_sso as sso

from aws_sso_mapper.exceptions import ValidationError

DEFAULT_SESSION_HOURS = 4
MIN_SESSION_SECONDS = 3600
MAX_SESSION_SECONDS = 12 * 3600

_NAME_PATTERN = re.compile(r"^[\w+=,.@-]{1,32}$")
_ACCOUNT_ID_PATTERN = re.compile(r"^\d{12}$")
_POLICY_ARN_PATTERN = re.compile(r"^arn:aws[a-z-]*:iam::(aws|\d{12}):policy/.+$")
_ISO_DURATION_PATTERN = re.compile(
    r"^P(?:(?P<days>\d+)D)?"
    r"(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$"
)

ManagedPolicyRef = Union[iam.IManagedPolicy, str]
InlinePolicy = Union[iam.PolicyDocument, Mapping[str, Any]]
SessionDuration = Union[cdk.Duration, str]


class PrincipalType(str, Enum):
    """Identity Store principal kinds an assignment can target."""

    USER = "USER"
    GROUP = "GROUP"


class TargetType(str, Enum):
    """Assignment target kinds accepted by AWS::SSO::Assignment."""

    AWS_ACCOUNT = "AWS_ACCOUNT"


def _is_token(value: Any) -> bool:
    return isinstance(value, str) and cdk.Token.is_unresolved(value)


def iso_duration_seconds(value: str) -> float:
    """
    Parse an ISO-8601 duration such as ``PT4H`` or ``PT1H30M`` into seconds.

    Raises:
        ValidationError: if the string is not a duration CloudFormation accepts.
    """
    match = _ISO_DURATION_PATTERN.match(value)
    if not match or value in ("P", "PT") or value.endswith("T"):
        raise ValidationError("session_duration", f"'{value}' is not an ISO-8601 duration")
    parts = match.groupdict()
    return (
        int(parts["days"] or 0) * 86400
        + int(parts["hours"] or 0) * 3600
        + int(parts["minutes"] or 0) * 60
        + float(parts["seconds"] or 0)
    )


def validate_name(value: str) -> None:
    if _is_token(value):
        return
    if not value:
        raise ValidationError("name", "a permission set name is required")
    if not isinstance(value, str) or not _NAME_PATTERN.match(value):
        raise ValidationError(
            "name", f"'{value}' must be 1-32 characters from [A-Za-z0-9_+=,.@-]"
        )


def validate_account_id(value: str) -> None:
    if _is_token(value):
        raise ValidationError("target_id", "must be a literal 12 digit account id, not a token")
    if not isinstance(value, str) or not _ACCOUNT_ID_PATTERN.match(value):
        raise ValidationError("target_id", f"'{value}' is not a 12 digit AWS account id")


def managed_policy_arn(policy: ManagedPolicyRef) -> str:
    """Return the ARN string for a managed policy reference."""
    if isinstance(policy, str):
        if _is_token(policy):
            return policy
        if not _POLICY_ARN_PATTERN.match(policy):
            raise ValidationError("managed_policies", f"'{policy}' is not an IAM policy ARN")
        return policy
    arn = getattr(policy, "managed_policy_arn", None)
    if arn is None:
        raise ValidationError(
            "managed_policies", f"unsupported managed policy reference {policy!r}"
        )
    return arn


def _policy_reference(
    reference: Any, field_name: str
) -> sso.CfnPermissionSet.CustomerManagedPolicyReferenceProperty:
    if isinstance(reference, sso.CfnPermissionSet.CustomerManagedPolicyReferenceProperty):
        return reference
    if not isinstance(reference, Mapping) or not reference.get("name"):
        raise ValidationError(field_name, "every customer managed policy reference needs a name")
    return sso.CfnPermissionSet.CustomerManagedPolicyReferenceProperty(
        name=reference["name"], path=reference.get("path")
    )


@dataclass(frozen=True)
class PermissionSetProps:
    """
    User supplied properties for a permission set.

    Attributes:
        name: The permission set name.
        description: Free text description. Defaults to ``name``.
        inline_policy: Inline policy document. Defaults to no inline policy.
        managed_policies: AWS managed policies, kept in the given order.
        session_duration: ``cdk.Duration`` or ISO-8601 string. Defaults to 4 hours.
        customer_managed_policy_references: ``{"name", "path"}`` mappings.
        permissions_boundary: Boundary property or its mapping form.
        relay_state: URL the user lands on after signing in.
        tags: Tags applied to the permission set.
    """

    name: str
    description: Optional[str] = None
    inline_policy: Optional[InlinePolicy] = None
    managed_policies: Sequence[ManagedPolicyRef] = ()
    session_duration: Optional[SessionDuration] = None
    customer_managed_policy_references: Sequence[Mapping[str, str]] = ()
    permissions_boundary: Optional[Any] = None
    relay_state: Optional[str] = None
    tags: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        validate_name(self.name)
        object.__setattr__(self, "managed_policies", tuple(self.managed_policies or ()))
        object.__setattr__(
            self,
            "customer_managed_policy_references",
            tuple(self.customer_managed_policy_references or ()),
        )
        if self.description is not None and not _is_token(self.description):
            if not isinstance(self.description, str) or not 1 <= len(self.description) <= 700:
                raise ValidationError("description", "must be 1-700 characters")
        if self.relay_state is not None and not _is_token(self.relay_state):
            if not isinstance(self.relay_state, str) or not 1 <= len(self.relay_state) <= 240:
                raise ValidationError("relay_state", "must be 1-240 characters")
        if not isinstance(self.tags, Mapping):
            raise ValidationError("tags", "must be a mapping of tag keys to values")
        for policy in self.managed_policies:
            managed_policy_arn(policy)
        self.session_duration_iso()
        self.customer_managed_policy_properties()
        self.permissions_boundary_property()

    @property
    def resolved_description(self) -> str:
        return self.description or self.name

    def session_duration_iso(self) -> str:
        """Session duration as an ISO-8601 string, bounded to 1-12 hours."""
        duration = self.session_duration
        if duration is None:
            duration = cdk.Duration.hours(DEFAULT_SESSION_HOURS)
        if isinstance(duration, cdk.Duration):
            seconds = duration.to_seconds()
            iso = duration.to_iso_string()
        elif _is_token(duration):
            return duration
        elif not isinstance(duration, str):
            raise ValidationError(
                "session_duration", "must be a cdk.Duration or an ISO-8601 string"
            )
        else:
            seconds = iso_duration_seconds(duration)
            iso = duration
        if not MIN_SESSION_SECONDS <= seconds <= MAX_SESSION_SECONDS:
            raise ValidationError("session_duration", f"{iso} is outside 1-12 hours")
        return iso

    def managed_policy_arns(self) -> List[str]:
        return [managed_policy_arn(policy) for policy in self.managed_policies]

    def inline_policy_json(self) -> Optional[Any]:
        if self.inline_policy is None:
            return None
        if isinstance(self.inline_policy, iam.PolicyDocument):
            return self.inline_policy.to_json()
        return dict(self.inline_policy)

    def customer_managed_policy_properties(
        self,
    ) -> Optional[List[sso.CfnPermissionSet.CustomerManagedPolicyReferenceProperty]]:
        if not self.customer_managed_policy_references:
            return None
        return [
            _policy_reference(reference, "customer_managed_policy_references")
            for reference in self.customer_managed_policy_references
        ]

    def permissions_boundary_property(
        self,
    ) -> Optional[sso.CfnPermissionSet.PermissionsBoundaryProperty]:
        boundary = self.permissions_boundary
        if boundary is None or isinstance(boundary, sso.CfnPermissionSet.PermissionsBoundaryProperty):
            return boundary
        if not isinstance(boundary, Mapping):
            raise ValidationError(
                "permissions_boundary", f"unsupported permissions boundary {boundary!r}"
            )
        arn = boundary.get("managed_policy_arn")
        reference = boundary.get("customer_managed_policy_reference")
        if not arn and not reference:
            raise ValidationError(
                "permissions_boundary",
                "needs a managed_policy_arn or a customer_managed_policy_reference",
            )
        return sso.CfnPermissionSet.PermissionsBoundaryProperty(
            managed_policy_arn=managed_policy_arn(arn) if arn else None,
            customer_managed_policy_reference=_policy_reference(reference, "permissions_boundary")
            if reference
            else None,
        )

    def cfn_tags(self) -> Optional[List[cdk.CfnTag]]:
        if not self.tags:
            return None
        return [cdk.CfnTag(key=key, value=value) for key, value in self.tags.items()]


@dataclass(frozen=True)
class AssignProps:
    """
    Principal-to-account assignment.

    Attributes:
        name: The principal name (``UserName`` or group ``DisplayName``).
        type: ``PrincipalType.USER`` or ``PrincipalType.GROUP``.
        target_id: The AWS account id.
    """

    name: str
    type: PrincipalType
    target_id: str

    def __post_init__(self) -> None:
        if not self.name or not isinstance(self.name, str):
            raise ValidationError("name", "a principal name is required")
        try:
            object.__setattr__(self, "type", PrincipalType(self.type))
        except ValueError:
            raise ValidationError(
                "type", f"'{self.type}' is not one of USER, GROUP"
            ) from None
        validate_account_id(self.target_id)

    @property
    def key(self) -> tuple:
        return (self.type.value, self.name, self.target_id)
