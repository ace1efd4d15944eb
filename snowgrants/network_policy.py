import logging
from dataclasses import dataclass, field
from typing import Optional

from snowflake.connector import SnowflakeConnection
from snowflake.connector.errors import ProgrammingError

from .client import DOES_NOT_EXIST_ERR, execute, execute_statement
from .enums import IpListKind
from .exceptions import QueryError
from .sql import NetworkPolicyStatement

logger = logging.getLogger("snowgrants")


@dataclass
class NetworkPolicy:
    """
    Description:
        A network policy restricts the IP addresses allowed to reach the account
        or a single user.

    Fields:
        name (string, required): The name of the network policy.
        allowed_ip_list (list): IPv4 addresses or CIDR ranges allowed to connect.
        blocked_ip_list (list): IPv4 addresses or CIDR ranges denied access.
        comment (string): A comment about the network policy.

    Yaml:

        ```yaml
        network_policies:
          - name: office_only
            allowed_ip_list: ["192.168.0.100/24", "29.254.123.20"]
            blocked_ip_list: ["192.168.0.101"]
            comment: Office network only
        ```
    """

    name: str
    allowed_ip_list: list[str] = field(default_factory=list)
    blocked_ip_list: list[str] = field(default_factory=list)
    comment: Optional[str] = None

    def __post_init__(self):
        if not self.name:
            raise ValueError("Network policy requires a name")
        self.allowed_ip_list = list(self.allowed_ip_list or [])
        self.blocked_ip_list = list(self.blocked_ip_list or [])

    def ip_list(self, kind: IpListKind) -> list[str]:
        return self.allowed_ip_list if kind == IpListKind.ALLOWED else self.blocked_ip_list


def _parse_ip_list(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [ip.strip() for ip in value.split(",") if ip.strip()]


def read_network_policy(session: SnowflakeConnection, name: str) -> Optional[NetworkPolicy]:
    stmt = NetworkPolicyStatement(name)
    sql = stmt.show()
    try:
        policies = [row for row in execute(session, sql) if row.get("name") == name]
        if len(policies) == 0:
            return None
        if len(policies) > 1:
            raise QueryError(f"Found multiple network policies matching {name}", sql=sql)
        sql = stmt.describe()
        desc_result = execute(session, sql, empty_response_codes=[DOES_NOT_EXIST_ERR])
    except ProgrammingError as err:
        raise QueryError(f"Failed to read network policy {name}: {err}", sql=sql) from err

    properties = {}
    for row in desc_result:
        try:
            properties[row["name"].lower()] = row["value"]
        except (KeyError, TypeError, AttributeError) as err:
            raise QueryError(f"Unexpected row shape for network policy {name}: {row!r}", sql=stmt.describe()) from err

    return NetworkPolicy(
        name=name,
        allowed_ip_list=_parse_ip_list(properties.get("allowed_ip_list")),
        blocked_ip_list=_parse_ip_list(properties.get("blocked_ip_list")),
        comment=policies[0].get("comment") or None,
    )


def create_network_policy(session: SnowflakeConnection, policy: NetworkPolicy) -> Optional[NetworkPolicy]:
    sql = NetworkPolicyStatement(policy.name).create(
        allowed_ip_list=policy.allowed_ip_list,
        blocked_ip_list=policy.blocked_ip_list,
        comment=policy.comment,
    )
    execute_statement(session, sql)
    return read_network_policy(session, policy.name)


def plan_network_policy_update(desired: NetworkPolicy, observed: NetworkPolicy) -> list[str]:
    """Return the ALTER statements needed to move `observed` to `desired`, in order."""
    stmt = NetworkPolicyStatement(desired.name)
    sqls = []
    for kind in IpListKind:
        # Snowflake keeps list order, but order carries no meaning for a policy
        if set(desired.ip_list(kind)) != set(observed.ip_list(kind)):
            sqls.append(stmt.change_ip_list(kind, desired.ip_list(kind)))
    if (desired.comment or None) != (observed.comment or None):
        if desired.comment:
            sqls.append(stmt.change_comment(desired.comment))
        else:
            sqls.append(stmt.remove_comment())
    return sqls


def update_network_policy(
    session: SnowflakeConnection,
    desired: NetworkPolicy,
    observed: Optional[NetworkPolicy] = None,
) -> Optional[NetworkPolicy]:
    if observed is None:
        observed = read_network_policy(session, desired.name)
    if observed is None:
        logger.info(f"Network policy {desired.name} does not exist, creating it")
        return create_network_policy(session, desired)

    for sql in plan_network_policy_update(desired, observed):
        execute_statement(session, sql)
    return read_network_policy(session, desired.name)


def delete_network_policy(session: SnowflakeConnection, name: str) -> None:
    execute_statement(session, NetworkPolicyStatement(name).drop())


def attach_network_policy(session: SnowflakeConnection, name: str, user: Optional[str] = None) -> None:
    """Activate a network policy on a user, or on the account when no user is given."""
    stmt = NetworkPolicyStatement(name)
    execute_statement(session, stmt.set_on_user(user) if user else stmt.set_on_account())


def detach_network_policy(session: SnowflakeConnection, name: str, user: Optional[str] = None) -> None:
    stmt = NetworkPolicyStatement(name)
    execute_statement(session, stmt.unset_on_user(user) if user else stmt.unset_on_account())
