import logging
from dataclasses import dataclass, field
from typing import Any

import yaml

from .network_policy import NetworkPolicy
from .role_grants import DesiredGrantSet

logger = logging.getLogger("snowgrants")

CONFIG_KEYS = {"role_grants", "network_policies"}


@dataclass
class GrantsConfig:
    role_grants: dict[str, DesiredGrantSet] = field(default_factory=dict)
    network_policies: list[NetworkPolicy] = field(default_factory=list)


def _add_grantees(grants: dict[str, dict[str, list]], role: str, key: str, names: list) -> None:
    entry = grants.setdefault(role, {"roles": [], "users": []})
    for name in names:
        if name not in entry[key]:
            entry[key].append(name)


def _name(role_grant: dict, key: str) -> str:
    value = role_grant[key]
    if not isinstance(value, str):
        raise TypeError(f"Role grant `{key}` must be a string, got: `{value!r}`")
    return value


def _names(role_grant: dict, key: str) -> list[str]:
    values = role_grant.get(key, [])
    if not isinstance(values, list) or not all(isinstance(value, str) for value in values):
        raise TypeError(f"Role grant `{key}` must be a list of strings, got: `{values!r}`")
    return values


def _grantees(role_grant: dict) -> tuple[list[str], list[str]]:
    roles = _names(role_grant, "to_roles")
    users = _names(role_grant, "to_users")
    if "to_role" in role_grant:
        roles = [_name(role_grant, "to_role")] + roles
    if "to_user" in role_grant:
        users = [_name(role_grant, "to_user")] + users
    if not roles and not users:
        raise ValueError(f"No role grants found in entry: `{role_grant}`")
    return roles, users


def _role_grants_from_config(role_grants_config: list) -> dict[str, DesiredGrantSet]:
    """
    Collect role grant entries into one desired grant set per role.

    Supported entry shapes:
        - role: X, to_role: Y | to_user: Y | to_roles: [...] | to_users: [...]
        - roles: [X, Z], to_role: Y | to_user: Y
    """
    if len(role_grants_config) == 0:
        return {}
    grants: dict[str, dict[str, list]] = {}
    for role_grant in role_grants_config:
        if not isinstance(role_grant, dict):
            raise ValueError(f"Role grant entries must be mappings, got: `{role_grant}`")
        # When only one role is being assigned
        if "role" in role_grant:
            roles, users = _grantees(role_grant)
            role = _name(role_grant, "role")
            _add_grantees(grants, role, "roles", roles)
            _add_grantees(grants, role, "users", users)
        # When multiple roles are being assigned, to a single user or role
        elif "roles" in role_grant:
            if "to_roles" in role_grant or "to_users" in role_grant:
                raise ValueError(f"Entries with `roles` take a single `to_role` or `to_user`: `{role_grant}`")
            roles, users = _grantees(role_grant)
            role_names = _names(role_grant, "roles")
            if not role_names:
                raise ValueError(f"Role grant entry lists no roles: `{role_grant}`")
            for role in role_names:
                _add_grantees(grants, role, "users", users)
                _add_grantees(grants, role, "roles", roles)
        else:
            raise ValueError(f"Role grant entry needs `role` or `roles`: `{role_grant}`")

    return {role: DesiredGrantSet.from_config(entry) for role, entry in grants.items()}


def _network_policies_from_config(network_policies_config: list) -> list[NetworkPolicy]:
    policies = []
    for policy in network_policies_config:
        if not isinstance(policy, dict) or "name" not in policy:
            raise ValueError(f"Network policies must be mappings with a name, got: `{policy}`")
        unknown = set(policy) - {"name", "allowed_ip_list", "blocked_ip_list", "comment"}
        if unknown:
            raise ValueError(f"Unexpected network policy fields: {sorted(unknown)}")
        policies.append(NetworkPolicy(**policy))
    return policies


def parse_config(config: dict[str, Any]) -> GrantsConfig:
    if config is None:
        return GrantsConfig()
    if not isinstance(config, dict):
        raise ValueError(f"Config must be a mapping, got: {type(config).__name__}")

    unknown = set(config) - CONFIG_KEYS
    if unknown:
        raise ValueError(f"Unexpected config keys: {sorted(unknown)}")

    return GrantsConfig(
        role_grants=_role_grants_from_config(config.get("role_grants") or []),
        network_policies=_network_policies_from_config(config.get("network_policies") or []),
    )


def load_config(path: str) -> GrantsConfig:
    logger.debug(f"Loading config from {path}")
    with open(path, "r", encoding="utf-8") as f:
        return parse_config(yaml.safe_load(f))
