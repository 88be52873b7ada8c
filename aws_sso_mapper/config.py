"""
Mapping document loading.

The document lists permission sets and, for each, the principals and
accounts it is assigned to. It is read from the ``sso_mapper`` CDK context
value, or from the JSON file named by the ``sso_mapper_config`` context value
or the ``SSO_MAPPER_CONFIG`` environment variable.
"""

import json
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from constructs import Node

from aws_sso_mapper.exceptions import ConfigurationError, SsoMapperError
from aws_sso_mapper.mapper import RESERVED_IDS
from aws_sso_mapper.props import AssignProps, PermissionSetProps, PrincipalType

logger = logging.getLogger(__name__)

CONFIG_CONTEXT_KEY = "sso_mapper"
CONFIG_PATH_CONTEXT_KEY = "sso_mapper_config"
CONFIG_PATH_ENV = "SSO_MAPPER_CONFIG"


@dataclass(frozen=True)
class AssignmentConfig:
    """One principal assigned to one or more accounts."""

    name: str
    type: PrincipalType
    target_ids: Tuple[str, ...]

    def to_props(self) -> List[AssignProps]:
        return [AssignProps(self.name, self.type, target_id) for target_id in self.target_ids]


@dataclass(frozen=True)
class PermissionSetConfig:
    id: str
    props: PermissionSetProps
    assignments: Tuple[AssignmentConfig, ...] = ()


@dataclass(frozen=True)
class MapperConfig:
    """Parsed mapping document plus optional instance overrides."""

    permission_sets: Tuple[PermissionSetConfig, ...] = ()
    instance_arn: Optional[str] = None
    identity_store_id: Optional[str] = None
    enable_nag: bool = True
    tags: Dict[str, str] = field(default_factory=dict)


def _require(document: Mapping[str, Any], key: str, where: str) -> Any:
    value = document.get(key)
    if value in (None, "", []):
        raise ConfigurationError(f"{where}: '{key}' is required")
    return value


def _expect(value: Any, kind: type, what: str) -> Any:
    if not isinstance(value, kind):
        expected = {Mapping: "an object", list: "a list", str: "a string"}.get(kind, kind.__name__)
        raise ConfigurationError(f"{what} must be {expected}")
    return value


def _optional(document: Mapping[str, Any], key: str, kind: type, where: str) -> Any:
    value = document.get(key)
    if value is None:
        return None
    return _expect(value, kind, f"{where}.{key}")


def _items(document: Mapping[str, Any], key: str, kind: type, where: str) -> List[Any]:
    values = _optional(document, key, list, where) or []
    for position, value in enumerate(values):
        _expect(value, kind, f"{where}.{key}[{position}]")
    return values


def parse_assignment(document: Mapping[str, Any], where: str) -> AssignmentConfig:
    name = _expect(_require(document, "name", where), str, f"{where}.name")
    raw_type = _expect(_require(document, "type", where), str, f"{where}.type").upper()
    try:
        principal_type = PrincipalType(raw_type)
    except ValueError:
        raise ConfigurationError(f"{where}: unknown principal type '{raw_type}'") from None
    target_ids = document.get("targetIds")
    if target_ids is None and document.get("targetId"):
        target_ids = [document["targetId"]]
    if not target_ids:
        raise ConfigurationError(f"{where}: 'targetIds' is required")
    _expect(target_ids, list, f"{where}.targetIds")
    assignment = AssignmentConfig(
        name=name,
        type=principal_type,
        target_ids=tuple(str(target_id) for target_id in target_ids),
    )
    try:
        assignment.to_props()
    except SsoMapperError as exc:
        raise ConfigurationError(f"{where}: {exc}") from exc
    return assignment


def parse_permission_set(document: Mapping[str, Any], index: int) -> PermissionSetConfig:
    where = f"permissionSets[{index}]"
    _expect(document, Mapping, where)
    name = _expect(_require(document, "name", where), str, f"{where}.name")
    construct_id = _optional(document, "id", str, where) or name
    try:
        props = PermissionSetProps(
            name=name,
            description=_optional(document, "description", str, where),
            inline_policy=_optional(document, "inlinePolicy", Mapping, where),
            managed_policies=_items(document, "managedPolicies", str, where),
            session_duration=_optional(document, "sessionDuration", str, where),
            customer_managed_policy_references=_items(
                document, "customerManagedPolicyReferences", Mapping, where
            ),
            permissions_boundary=_boundary(
                _optional(document, "permissionsBoundary", Mapping, where)
            ),
            relay_state=_optional(document, "relayState", str, where),
            tags=_optional(document, "tags", Mapping, where) or {},
        )
    except ConfigurationError:
        raise
    except SsoMapperError as exc:
        raise ConfigurationError(f"{where}: {exc}") from exc

    assignments = tuple(
        parse_assignment(assignment, f"{where}.assignments[{position}]")
        for position, assignment in enumerate(_items(document, "assignments", Mapping, where))
    )
    return PermissionSetConfig(
        id=construct_id,
        props=props,
        assignments=assignments,
    )


def _boundary(document: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    if not document:
        return None
    return {
        "managed_policy_arn": document.get("managedPolicyArn"),
        "customer_managed_policy_reference": document.get("customerManagedPolicyReference"),
    }


def parse_config(document: Mapping[str, Any]) -> MapperConfig:
    """
    Build a ``MapperConfig`` from a mapping document.

    Raises:
        ConfigurationError: if a required key is missing, a value has the
            wrong JSON type, a principal type is unknown, a literal fails
            validation or two permission sets share an id.
    """
    if not isinstance(document, Mapping):
        raise ConfigurationError("mapping document must be a JSON object")

    permission_sets = tuple(
        parse_permission_set(entry, index)
        for index, entry in enumerate(_optional(document, "permissionSets", list, "document") or [])
    )
    seen = set()
    for entry in permission_sets:
        if entry.id in RESERVED_IDS:
            raise ConfigurationError(f"permission set id '{entry.id}' is reserved")
        if entry.id in seen:
            raise ConfigurationError(f"duplicate permission set id '{entry.id}'")
        seen.add(entry.id)

    enable_nag = document.get("enableNag", True)
    if isinstance(enable_nag, str):
        enable_nag = enable_nag.lower() not in ("false", "0", "no")

    return MapperConfig(
        permission_sets=permission_sets,
        instance_arn=_optional(document, "instanceArn", str, "document"),
        identity_store_id=_optional(document, "identityStoreId", str, "document"),
        enable_nag=bool(enable_nag),
        tags=dict(_optional(document, "tags", Mapping, "document") or {}),
    )


def load_config_file(path: str) -> MapperConfig:
    try:
        with open(path, "r", encoding="utf-8") as config_file:
            document = json.load(config_file)
    except FileNotFoundError:
        raise ConfigurationError(f"mapping document {path} not found") from None
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"mapping document {path} is not valid JSON: {exc}") from exc
    logger.info("Loaded mapping document %s", path)
    return parse_config(document)


def load_config(node: Node) -> MapperConfig:
    """
    Resolve the mapping for an app from CDK context and the environment.

    Inline context wins over a file path; the ``instance_arn``,
    ``identity_store_id`` and ``enable_nag`` context values override the
    document.
    """
    inline = node.try_get_context(CONFIG_CONTEXT_KEY)
    path = node.try_get_context(CONFIG_PATH_CONTEXT_KEY) or os.environ.get(CONFIG_PATH_ENV)

    if inline is not None:
        if isinstance(inline, str):
            try:
                inline = json.loads(inline)
            except json.JSONDecodeError as exc:
                raise ConfigurationError(f"'{CONFIG_CONTEXT_KEY}' context is not valid JSON") from exc
        config = parse_config(inline)
    elif path:
        config = load_config_file(str(Path(path).expanduser()))
    else:
        logger.warning("No mapping document configured, only the SSO instance lookup is synthesized")
        config = MapperConfig()

    overrides: Dict[str, Any] = {}
    for key in ("instance_arn", "identity_store_id"):
        value = node.try_get_context(key)
        if value:
            overrides[key] = value
    enable_nag = node.try_get_context("enable_nag")
    if enable_nag is not None:
        overrides["enable_nag"] = str(enable_nag).lower() not in ("false", "0", "no")

    return replace(config, **overrides)
