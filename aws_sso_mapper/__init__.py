"""
CDK constructs for IAM Identity Center (AWS SSO) permission sets and
account assignments.
"""

from aws_sso_mapper.config import MapperConfig, load_config, parse_config
from aws_sso_mapper.exceptions import (
    ConfigurationError,
    DuplicateAssignmentError,
    SsoMapperError,
    ValidationError,
)
from aws_sso_mapper.graph import SsoResourceGraph
from aws_sso_mapper.instance import InstanceContext, SsoInstanceResolver
from aws_sso_mapper.mapper import AwsSsoMapper
from aws_sso_mapper.permission_set import PermissionSet
from aws_sso_mapper.principal import PrincipalResolver
from aws_sso_mapper.props import AssignProps, PermissionSetProps, PrincipalType, TargetType
from aws_sso_mapper.values import Deferred, Literal

__version__ = "1.0.0"

__all__ = [
    "AssignProps",
    "AwsSsoMapper",
    "ConfigurationError",
    "Deferred",
    "DuplicateAssignmentError",
    "InstanceContext",
    "Literal",
    "MapperConfig",
    "PermissionSet",
    "PermissionSetProps",
    "PrincipalResolver",
    "PrincipalType",
    "SsoInstanceResolver",
    "SsoMapperError",
    "SsoResourceGraph",
    "TargetType",
    "ValidationError",
    "load_config",
    "parse_config",
]
