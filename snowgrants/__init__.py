import logging

from .config import GrantsConfig, load_config, parse_config
from .connector import connect
from .network_policy import (
    NetworkPolicy,
    create_network_policy,
    delete_network_policy,
    read_network_policy,
    update_network_policy,
)
from .role_grants import (
    DesiredGrantSet,
    RoleGrants,
    create_role_grants,
    delete_role_grants,
    read_role_grants,
    reconcile,
    update_role_grants,
)

logger = logging.getLogger("snowgrants")

__all__ = [
    "DesiredGrantSet",
    "GrantsConfig",
    "NetworkPolicy",
    "RoleGrants",
    "connect",
    "create_network_policy",
    "create_role_grants",
    "delete_network_policy",
    "delete_role_grants",
    "load_config",
    "parse_config",
    "read_network_policy",
    "read_role_grants",
    "reconcile",
    "update_network_policy",
    "update_role_grants",
]
