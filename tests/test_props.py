"""
Unit tests for permission set and assignment properties.
"""

import pytest
import aws_cdk as cdk
from aws_cdk import aws_iam as iam

from aws_sso_mapper.exceptions import ValidationError
from aws_sso_mapper.props import (
    AssignProps,
    PermissionSetProps,
    PrincipalType,
    iso_duration_seconds,
)


class TestPermissionSetProps:
    """Test suite for PermissionSetProps."""

    def test_description_defaults_to_name(self):
        props = PermissionSetProps(name="ReadOnly")

        assert props.resolved_description == "ReadOnly"

    def test_explicit_description_is_kept(self):
        props = PermissionSetProps(name="ReadOnly", description="Read only access")

        assert props.resolved_description == "Read only access"

    def test_session_duration_defaults_to_four_hours(self):
        assert PermissionSetProps(name="ReadOnly").session_duration_iso() == "PT4H"

    @pytest.mark.parametrize(
        "duration, expected",
        [
            (cdk.Duration.hours(8), "PT8H"),
            (cdk.Duration.minutes(90), "PT1H30M"),
            ("PT2H", "PT2H"),
            ("PT12H", "PT12H"),
        ],
    )
    def test_session_duration_is_iso_8601(self, duration, expected):
        props = PermissionSetProps(name="ReadOnly", session_duration=duration)

        assert props.session_duration_iso() == expected

    @pytest.mark.parametrize("duration", ["PT13H", "PT30M", "P1D", "4 hours", "PT", ""])
    def test_invalid_session_duration_rejected(self, duration):
        with pytest.raises(ValidationError):
            PermissionSetProps(name="ReadOnly", session_duration=duration)

    @pytest.mark.parametrize("name", ["", "has space", "x" * 33, "semi;colon"])
    def test_invalid_name_rejected(self, name):
        with pytest.raises(ValidationError) as excinfo:
            PermissionSetProps(name=name)

        assert excinfo.value.field == "name"

    def test_validation_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            PermissionSetProps(name="")

    def test_description_length_enforced(self):
        with pytest.raises(ValidationError):
            PermissionSetProps(name="ReadOnly", description="d" * 701)

    def test_managed_policy_order_preserved(self):
        arns = [
            "arn:aws:iam::aws:policy/ReadOnlyAccess",
            "arn:aws:iam::aws:policy/job-function/ViewOnlyAccess",
            "arn:aws:iam::aws:policy/ReadOnlyAccess",
            "arn:aws:iam::123456789012:policy/custom",
        ]
        props = PermissionSetProps(name="ReadOnly", managed_policies=arns)

        assert props.managed_policy_arns() == arns

    def test_managed_policy_objects_resolve_to_arns(self):
        stack = cdk.Stack()
        policy = iam.ManagedPolicy.from_aws_managed_policy_name("ReadOnlyAccess")
        props = PermissionSetProps(name="ReadOnly", managed_policies=[policy])

        arns = props.managed_policy_arns()

        assert len(arns) == 1
        assert stack.resolve(arns[0]) == {
            "Fn::Join": ["", ["arn:", {"Ref": "AWS::Partition"}, ":iam::aws:policy/ReadOnlyAccess"]]
        }

    def test_malformed_policy_arn_rejected(self):
        with pytest.raises(ValidationError):
            PermissionSetProps(name="ReadOnly", managed_policies=["ReadOnlyAccess"])

    def test_inline_policy_document_rendered(self):
        document = iam.PolicyDocument(
            statements=[
                iam.PolicyStatement(actions=["s3:GetObject"], resources=["*"])
            ]
        )
        props = PermissionSetProps(name="ReadOnly", inline_policy=document)

        assert props.inline_policy_json() == {
            "Version": "2012-10-17",
            "Statement": [{"Action": "s3:GetObject", "Effect": "Allow", "Resource": "*"}],
        }

    def test_no_inline_policy_by_default(self):
        assert PermissionSetProps(name="ReadOnly").inline_policy_json() is None

    def test_customer_managed_policy_reference_requires_name(self):
        with pytest.raises(ValidationError) as excinfo:
            PermissionSetProps(
                name="ReadOnly", customer_managed_policy_references=[{"path": "/"}]
            )

        assert excinfo.value.field == "customer_managed_policy_references"

    @pytest.mark.parametrize(
        "boundary",
        [
            {"customer_managed_policy_reference": {"path": "/"}},
            {"customer_managed_policy_reference": "boundary"},
            {"managed_policy_arn": "not-an-arn"},
            {},
            "arn:aws:iam::aws:policy/PowerUserAccess",
        ],
    )
    def test_malformed_permissions_boundary_rejected(self, boundary):
        with pytest.raises(ValidationError):
            PermissionSetProps(name="ReadOnly", permissions_boundary=boundary)

    def test_customer_managed_permissions_boundary(self):
        props = PermissionSetProps(
            name="ReadOnly",
            permissions_boundary={
                "customer_managed_policy_reference": {"name": "boundary", "path": "/sso/"}
            },
        )

        reference = props.permissions_boundary_property().customer_managed_policy_reference
        assert (reference.name, reference.path) == ("boundary", "/sso/")

    def test_relay_state_length_enforced(self):
        with pytest.raises(ValidationError) as excinfo:
            PermissionSetProps(name="ReadOnly", relay_state="x" * 241)

        assert excinfo.value.field == "relay_state"

    def test_relay_state_at_limit_accepted(self):
        props = PermissionSetProps(name="ReadOnly", relay_state="x" * 240)

        assert props.relay_state == "x" * 240

    @pytest.mark.parametrize(
        "field_name, value",
        [
            ("session_duration", 4),
            ("description", 7),
            ("relay_state", ["https://example.com"]),
            ("tags", ["Team"]),
        ],
    )
    def test_non_string_values_rejected(self, field_name, value):
        with pytest.raises(ValidationError) as excinfo:
            PermissionSetProps(name="ReadOnly", **{field_name: value})

        assert excinfo.value.field == field_name

    def test_non_string_name_rejected(self):
        with pytest.raises(ValidationError):
            PermissionSetProps(name=7)

    def test_tags_rendered_in_order(self):
        props = PermissionSetProps(name="ReadOnly", tags={"b": "2", "a": "1"})

        assert [(tag.key, tag.value) for tag in props.cfn_tags()] == [("b", "2"), ("a", "1")]


class TestAssignProps:
    """Test suite for AssignProps."""

    def test_principal_type_coerced_from_string(self):
        props = AssignProps(name="alice", type="USER", target_id="111111111111")

        assert props.type is PrincipalType.USER
        assert props.key == ("USER", "alice", "111111111111")

    def test_unknown_principal_type_rejected(self):
        with pytest.raises(ValidationError) as excinfo:
            AssignProps(name="alice", type="ROLE", target_id="111111111111")

        assert excinfo.value.field == "type"

    @pytest.mark.parametrize("target_id", ["", "1234", "11111111111a", "1111111111111"])
    def test_invalid_account_id_rejected(self, target_id):
        with pytest.raises(ValidationError):
            AssignProps(name="alice", type=PrincipalType.USER, target_id=target_id)

    def test_empty_principal_name_rejected(self):
        with pytest.raises(ValidationError):
            AssignProps(name="", type=PrincipalType.GROUP, target_id="111111111111")

    def test_token_account_id_rejected(self):
        stack = cdk.Stack()

        with pytest.raises(ValidationError) as excinfo:
            AssignProps(name="alice", type=PrincipalType.USER, target_id=stack.account)

        assert excinfo.value.field == "target_id"


def test_iso_duration_seconds():
    assert iso_duration_seconds("PT4H") == 4 * 3600
    assert iso_duration_seconds("PT1H30M") == 5400
    assert iso_duration_seconds("PT3600S") == 3600
