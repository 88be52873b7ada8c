"""
Unit tests for the SsoMapperStack.

These tests synthesize the example mapping document and check the
resources, outputs and tags of the resulting stack.
"""

import json
from pathlib import Path

import pytest
import aws_cdk as cdk
from aws_cdk import assertions

from aws_sso_mapper import parse_config
from aws_sso_mapper.config import load_config_file
from stacks.sso_mapper_stack import SsoMapperStack

EXAMPLE_MAPPING = Path(__file__).resolve().parent.parent / "examples" / "mapping.json"


class TestSsoMapperStack:
    """Test suite for SsoMapperStack."""

    @pytest.fixture
    def stack(self) -> SsoMapperStack:
        app = cdk.App()
        return SsoMapperStack(
            app,
            "TestStack",
            config=load_config_file(str(EXAMPLE_MAPPING)),
            env=cdk.Environment(account="123456789012", region="us-east-1"),
        )

    def test_resource_counts(self, stack: SsoMapperStack) -> None:
        template = assertions.Template.from_stack(stack)

        template.resource_count_is("AWS::SSO::PermissionSet", 2)
        # alice + devs in two accounts for ReadOnly, finance for Billing
        template.resource_count_is("AWS::SSO::Assignment", 4)
        # instance lookup + alice + devs + finance
        template.resource_count_is("Custom::AWS", 4)
        template.resource_count_is("AWS::Lambda::Function", 1)

    def test_permission_sets(self, stack: SsoMapperStack) -> None:
        template = assertions.Template.from_stack(stack)

        template.has_resource_properties("AWS::SSO::PermissionSet", {
            "Name": "ReadOnly",
            "Description": "Read only access to workload accounts",
            "SessionDuration": "PT4H",
            "ManagedPolicies": ["arn:aws:iam::aws:policy/ReadOnlyAccess"],
        })
        template.has_resource_properties("AWS::SSO::PermissionSet", {
            "Name": "Billing",
            "Description": "Billing",
            "SessionDuration": "PT1H",
            "InlinePolicy": assertions.Match.object_like({"Version": "2012-10-17"}),
        })

    def test_group_assignments(self, stack: SsoMapperStack) -> None:
        template = assertions.Template.from_stack(stack)
        assignments = template.find_resources("AWS::SSO::Assignment", {
            "Properties": {"PrincipalType": "GROUP"}
        })

        targets = sorted(
            resource["Properties"]["TargetId"] for resource in assignments.values()
        )
        assert targets == ["111111111111", "111111111111", "222222222222"]

    def test_stack_outputs(self, stack: SsoMapperStack) -> None:
        template = assertions.Template.from_stack(stack)

        template.has_output("InstanceArn", {})
        template.has_output("IdentityStoreId", {})
        template.has_output("PermissionSetReadOnlyArn", {})
        template.has_output("PermissionSetBillingArn", {})

    def test_permission_set_outputs_do_not_shadow_instance_output(self) -> None:
        document = {
            "instanceArn": "arn:aws:sso:::instance/ssoins-1234567890abcdef",
            "identityStoreId": "d-1234567890",
            "permissionSets": [{"id": "IdentityStore", "name": "IdentityStore"}],
        }
        stack = SsoMapperStack(cdk.App(), "OutputStack", config=parse_config(document))

        template = assertions.Template.from_stack(stack)
        template.has_output("InstanceArn", {
            "Value": "arn:aws:sso:::instance/ssoins-1234567890abcdef"
        })
        template.has_output("IdentityStoreId", {"Value": "d-1234567890"})
        template.has_output("PermissionSetIdentityStoreArn", {
            "Value": {"Fn::GetAtt": [assertions.Match.any_value(), "PermissionSetArn"]}
        })

    def test_tags(self, stack: SsoMapperStack) -> None:
        template = assertions.Template.from_stack(stack)

        template.has_resource_properties("AWS::SSO::PermissionSet", {
            "Tags": assertions.Match.array_with([
                {"Key": "Owner", "Value": "platform-team"},
            ])
        })

    def test_literal_instance(self) -> None:
        document = json.loads(EXAMPLE_MAPPING.read_text(encoding="utf-8"))
        document["instanceArn"] = "arn:aws:sso:::instance/ssoins-1234567890abcdef"
        document["identityStoreId"] = "d-1234567890"
        stack = SsoMapperStack(cdk.App(), "LiteralStack", config=parse_config(document))

        template = assertions.Template.from_stack(stack)
        template.resource_count_is("Custom::AWS", 3)
        template.has_output("InstanceArn", {
            "Value": "arn:aws:sso:::instance/ssoins-1234567890abcdef"
        })

    def test_empty_mapping(self) -> None:
        stack = SsoMapperStack(cdk.App(), "EmptyStack", config=parse_config({}))

        template = assertions.Template.from_stack(stack)
        template.resource_count_is("AWS::SSO::PermissionSet", 0)
        template.resource_count_is("Custom::AWS", 1)
