"""Exceptions raised while building the SSO construct graph."""


class SsoMapperError(Exception):
    """Base class for all errors raised by aws_sso_mapper."""


class ValidationError(SsoMapperError, ValueError):
    """A literal property was missing or malformed at synthesis time."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


class DuplicateAssignmentError(ValidationError):
    """Two assignments would be addressed by the same construct id."""

    def __init__(self, construct_id: str, existing: str, requested: str):
        self.construct_id = construct_id
        self.existing = existing
        self.requested = requested
        super().__init__(
            "assignment",
            f"{requested} collides with {existing} on construct id '{construct_id}'",
        )


class ConfigurationError(SsoMapperError):
    """The mapping document or CDK context values are invalid."""
