"""
Role grants: granting one role to other roles and users, and reconciling the
grants Snowflake reports against a desired set.

A grant has no identity of its own, it exists only as a row in the output of
SHOW GRANTS OF ROLE. The unit of identity is (role, grantee).
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from snowflake.connector import SnowflakeConnection
from snowflake.connector.errors import ProgrammingError

from .client import execute, execute_statement
from .enums import GrantAction, GranteeType
from .exceptions import NoGranteesSpecifiedError, QueryError
from .sql import RoleGrantStatement, strip_quotes

logger = logging.getLogger("snowgrants")


@dataclass(frozen=True)
class GrantTarget:
    kind: GranteeType
    name: str

    def __str__(self):
        return f"{self.kind.value.lower()} {self.name}"


@dataclass(frozen=True)
class GrantOperation:
    action: GrantAction
    target: GrantTarget

    def __str__(self):
        return f"{self.action.value.lower()}({self.target.kind.value.lower()}, {self.target.name})"


@dataclass(frozen=True)
class DesiredGrantSet:
    roles: tuple[str, ...] = ()
    users: tuple[str, ...] = ()

    def __post_init__(self):
        # Accept any sequence, store as tuples so the record stays hashable
        object.__setattr__(self, "roles", tuple(self.roles))
        object.__setattr__(self, "users", tuple(self.users))

    @classmethod
    def from_config(cls, data: dict) -> "DesiredGrantSet":
        """Decode the `roles` and `users` lists of a role grants record."""
        if not isinstance(data, dict):
            raise TypeError(f"Role grants must be a mapping, got: {data!r}")
        return cls(
            roles=_string_list(data, "roles"),
            users=_string_list(data, "users"),
        )

    def role_set(self) -> frozenset[str]:
        return frozenset(self.roles)

    def user_set(self) -> frozenset[str]:
        return frozenset(self.users)

    def names_for(self, kind: GranteeType) -> frozenset[str]:
        return self.role_set() if kind == GranteeType.ROLE else self.user_set()

    def is_empty(self) -> bool:
        return len(self.roles) == 0 and len(self.users) == 0


def _string_list(data: dict, key: str) -> tuple[str, ...]:
    values = data.get(key)
    if values is None:
        return ()
    if isinstance(values, str) or not isinstance(values, (list, tuple)):
        raise TypeError(f"`{key}` must be a list of names, got: {values!r}")
    for value in values:
        if not isinstance(value, str):
            raise TypeError(f"`{key}` must only contain strings, got: {value!r}")
    return tuple(values)


@dataclass(frozen=True)
class ObservedGrant:
    granted_to: str
    grantee_name: str


@dataclass
class RoleGrants:
    role_name: str
    roles: list[str] = field(default_factory=list)
    users: list[str] = field(default_factory=list)


# Grant reader


def read_grants(session: SnowflakeConnection, role_name: str) -> list[ObservedGrant]:
    sql = RoleGrantStatement(role_name).show_grants_of()
    try:
        rows = execute(session, sql)
    except ProgrammingError as err:
        raise QueryError(f"Failed to read grants of role {role_name}: {err}", sql=sql) from err

    grants = []
    for row in rows:
        try:
            granted_to = row["granted_to"]
            grantee_name = row["grantee_name"]
        except (KeyError, TypeError) as err:
            raise QueryError(f"Unexpected row shape for grants of role {role_name}: {row!r}", sql=sql) from err
        if not isinstance(granted_to, str) or not isinstance(grantee_name, str):
            raise QueryError(f"Unexpected row values for grants of role {role_name}: {row!r}", sql=sql)
        grants.append(ObservedGrant(granted_to=granted_to, grantee_name=strip_quotes(grantee_name)))
    return grants


def partition_grants(observed: list[ObservedGrant]) -> dict[GranteeType, set[str]]:
    """Split observed grants into role and user grantee names.

    Raises UnknownGrantTypeError on the first row that is neither ROLE nor USER.
    """
    partitions = {GranteeType.ROLE: set(), GranteeType.USER: set()}
    for grant in observed:
        partitions[GranteeType.from_granted_to(grant.granted_to)].add(grant.grantee_name)
    return partitions


# Statement executor boundary


def grant_role_to_role(session: SnowflakeConnection, role_name: str, to_role: str) -> None:
    execute_statement(session, RoleGrantStatement(role_name).role(to_role).grant())


def grant_role_to_user(session: SnowflakeConnection, role_name: str, to_user: str) -> None:
    execute_statement(session, RoleGrantStatement(role_name).user(to_user).grant())


def revoke_role_from_role(session: SnowflakeConnection, role_name: str, from_role: str) -> None:
    execute_statement(session, RoleGrantStatement(role_name).role(from_role).revoke())


def revoke_role_from_user(session: SnowflakeConnection, role_name: str, from_user: str) -> None:
    execute_statement(session, RoleGrantStatement(role_name).user(from_user).revoke())


GrantFunc = Callable[[SnowflakeConnection, str, str], None]

# Categories are independent, roles are always processed before users
GRANT_CATEGORIES: dict[GranteeType, dict[GrantAction, GrantFunc]] = {
    GranteeType.ROLE: {
        GrantAction.REVOKE: revoke_role_from_role,
        GrantAction.GRANT: grant_role_to_role,
    },
    GranteeType.USER: {
        GrantAction.REVOKE: revoke_role_from_user,
        GrantAction.GRANT: grant_role_to_user,
    },
}


# Reconciler


def _operations(action: GrantAction, kind: GranteeType, names) -> list[GrantOperation]:
    return [GrantOperation(action, GrantTarget(kind, name)) for name in dict.fromkeys(names)]


def plan_reconciliation(
    role_name: str,
    desired: DesiredGrantSet,
    observed: list[ObservedGrant],
) -> list[GrantOperation]:
    """
    Compute the minimal grant and revoke operations that move the observed
    grants of `role_name` to the desired set.

    Within each category all revokes come before any grant. Names are sorted so the
    plan is deterministic.
    """
    existing = partition_grants(observed)

    plan = []
    for kind in GRANT_CATEGORIES:
        desired_names = desired.names_for(kind)
        observed_names = existing[kind]
        to_revoke = observed_names - desired_names
        to_grant = desired_names - observed_names
        logger.debug(
            f"{role_name} {kind} grants: desired={sorted(desired_names)} observed={sorted(observed_names)}"
        )
        plan += _operations(GrantAction.REVOKE, kind, sorted(to_revoke))
        plan += _operations(GrantAction.GRANT, kind, sorted(to_grant))
    return plan


def apply_operations(session: SnowflakeConnection, role_name: str, plan: list[GrantOperation]) -> None:
    """Apply operations one at a time. The first failure stops the run, nothing is rolled back."""
    for op in plan:
        logger.info(f"{op.action.value.lower()} role {role_name}: {op.target}")
        GRANT_CATEGORIES[op.target.kind][op.action](session, role_name, op.target.name)


def reconcile(
    session: SnowflakeConnection,
    role_name: str,
    desired: DesiredGrantSet,
    observed: list[ObservedGrant],
) -> list[GrantOperation]:
    plan = plan_reconciliation(role_name, desired, observed)
    if not plan:
        logger.debug(f"Role grants for {role_name} are up to date")
    apply_operations(session, role_name, plan)
    return plan


# Lifecycle handlers


def read_role_grants(session: SnowflakeConnection, role_name: str) -> RoleGrants:
    partitions = partition_grants(read_grants(session, role_name))
    return RoleGrants(
        role_name=role_name,
        roles=sorted(partitions[GranteeType.ROLE]),
        users=sorted(partitions[GranteeType.USER]),
    )


def create_role_grants(session: SnowflakeConnection, role_name: str, desired: DesiredGrantSet) -> RoleGrants:
    if desired.is_empty():
        raise NoGranteesSpecifiedError(f"No users or roles specified for role grants of {role_name}")

    plan = _operations(GrantAction.GRANT, GranteeType.ROLE, desired.roles)
    plan += _operations(GrantAction.GRANT, GranteeType.USER, desired.users)
    apply_operations(session, role_name, plan)
    return read_role_grants(session, role_name)


def update_role_grants(session: SnowflakeConnection, role_name: str, desired: DesiredGrantSet) -> RoleGrants:
    reconcile(session, role_name, desired, read_grants(session, role_name))
    return read_role_grants(session, role_name)


def delete_role_grants(
    session: SnowflakeConnection,
    role_name: str,
    desired: Optional[DesiredGrantSet] = None,
) -> RoleGrants:
    """Revoke the grants recorded for `role_name`. Without a record, revoke everything observed."""
    if desired is None:
        current = read_role_grants(session, role_name)
        desired = DesiredGrantSet(roles=current.roles, users=current.users)

    plan = _operations(GrantAction.REVOKE, GranteeType.ROLE, desired.roles)
    plan += _operations(GrantAction.REVOKE, GranteeType.USER, desired.users)
    apply_operations(session, role_name, plan)
    return RoleGrants(role_name=role_name)
