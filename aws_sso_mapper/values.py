"""
Tagged values for properties that may be unknown until deployment.

A ``Literal`` carries a value known at synthesis time. A ``Deferred`` wraps a
CloudFormation reference (``Fn::GetAtt`` on a resource or custom resource
response) that is only resolved when the stack is applied. Consumers render
either variant through :func:`render` instead of assuming an eager value.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

import aws_cdk as cdk

T = TypeVar("T")


@dataclass(frozen=True)
class Literal(Generic[T]):
    """A value known while the construct tree is being built."""

    value: T

    @property
    def is_deferred(self) -> bool:
        return False


@dataclass(frozen=True)
class Deferred:
    """A value resolved by CloudFormation at apply time."""

    reference: cdk.Reference

    @property
    def is_deferred(self) -> bool:
        return True


Value = Union[Literal[Any], Deferred]


def render(value: Value) -> Any:
    """Return what a CloudFormation property expects for ``value``."""
    if isinstance(value, Deferred):
        return cdk.Token.as_string(value.reference)
    if isinstance(value, Literal):
        return value.value
    raise TypeError(f"Expected Literal or Deferred, got {type(value).__name__}")


def wrap(value: Any) -> Value:
    """Lift a plain value (or an unresolved CDK token string) into a tagged value."""
    if isinstance(value, (Literal, Deferred)):
        return value
    if isinstance(value, cdk.Reference):
        return Deferred(value)
    return Literal(value)
