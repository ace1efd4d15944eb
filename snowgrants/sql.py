"""
SQL statement builders.

Identifiers are interpolated as double-quoted names and are not escaped, callers
must not pass names containing a double quote. String literals (comments, ip
addresses) have embedded single quotes doubled.
"""

from typing import Optional

from .enums import GranteeType, IpListKind


def quote_identifier(name: str) -> str:
    return f'"{name}"'


def quote_literal(value: str) -> str:
    return "'" + str(value).replace("'", "''") + "'"


def strip_quotes(name: str) -> str:
    """Remove one leading and one trailing double quote, if present."""
    if name.startswith('"'):
        name = name[1:]
    if name.endswith('"'):
        name = name[:-1]
    return name


def _literal_list(values: Optional[list[str]]) -> str:
    return "(" + ", ".join(quote_literal(v) for v in values or []) + ")"


class RoleGrantStatement:
    """
    Builds GRANT ROLE / REVOKE ROLE statements for one role.

    >>> RoleGrantStatement("analyst").user("alice").grant()
    'GRANT ROLE "analyst" TO USER "alice"'
    """

    def __init__(self, role_name: str):
        self.role_name = role_name
        self.grantee_type: Optional[GranteeType] = None
        self.grantee_name: Optional[str] = None

    def role(self, name: str) -> "RoleGrantStatement":
        return self._to(GranteeType.ROLE, name)

    def user(self, name: str) -> "RoleGrantStatement":
        return self._to(GranteeType.USER, name)

    def _to(self, grantee_type: GranteeType, name: str) -> "RoleGrantStatement":
        stmt = RoleGrantStatement(self.role_name)
        stmt.grantee_type = grantee_type
        stmt.grantee_name = name
        return stmt

    def _grantee(self) -> str:
        if self.grantee_type is None:
            raise ValueError(f"No grantee set for role grant on {self.role_name}")
        return f"{self.grantee_type} {quote_identifier(self.grantee_name)}"

    def grant(self) -> str:
        return f"GRANT ROLE {quote_identifier(self.role_name)} TO {self._grantee()}"

    def revoke(self) -> str:
        return f"REVOKE ROLE {quote_identifier(self.role_name)} FROM {self._grantee()}"

    def show_grants_of(self) -> str:
        return f"SHOW GRANTS OF ROLE {quote_identifier(self.role_name)}"


class NetworkPolicyStatement:
    def __init__(self, name: str):
        self.name = name

    @property
    def _qualified_name(self) -> str:
        return quote_identifier(self.name)

    def create(
        self,
        allowed_ip_list: Optional[list[str]] = None,
        blocked_ip_list: Optional[list[str]] = None,
        comment: Optional[str] = None,
    ) -> str:
        sql = f"CREATE NETWORK POLICY {self._qualified_name} ALLOWED_IP_LIST = {_literal_list(allowed_ip_list)}"
        if blocked_ip_list:
            sql += f" BLOCKED_IP_LIST = {_literal_list(blocked_ip_list)}"
        if comment:
            sql += f" COMMENT = {quote_literal(comment)}"
        return sql

    def show(self) -> str:
        return f"SHOW NETWORK POLICIES LIKE {quote_literal(self.name)}"

    def describe(self) -> str:
        return f"DESC NETWORK POLICY {self._qualified_name}"

    def drop(self) -> str:
        return f"DROP NETWORK POLICY {self._qualified_name}"

    def change_comment(self, comment: str) -> str:
        return f"ALTER NETWORK POLICY {self._qualified_name} SET COMMENT = {quote_literal(comment)}"

    def remove_comment(self) -> str:
        return f"ALTER NETWORK POLICY {self._qualified_name} UNSET COMMENT"

    def change_ip_list(self, kind: str, ips: Optional[list[str]]) -> str:
        kind = IpListKind.parse(kind)
        return f"ALTER NETWORK POLICY {self._qualified_name} SET {kind}_IP_LIST = {_literal_list(ips)}"

    def set_on_account(self) -> str:
        return f"ALTER ACCOUNT SET NETWORK_POLICY = {self._qualified_name}"

    def unset_on_account(self) -> str:
        return "ALTER ACCOUNT UNSET NETWORK_POLICY"

    def set_on_user(self, user: str) -> str:
        return f"ALTER USER {quote_identifier(user)} SET NETWORK_POLICY = {self._qualified_name}"

    def unset_on_user(self, user: str) -> str:
        return f"ALTER USER {quote_identifier(user)} UNSET NETWORK_POLICY"
