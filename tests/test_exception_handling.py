"""
Tests for exception handling across snowgrants.

These tests verify:
- All exception classes in snowgrants/exceptions.py work correctly
- Grantee type classification rejects unknown values
- Database errors surface with the failing statement attached
"""

import pytest

from snowgrants.enums import GrantAction, GranteeType, IpListKind
from snowgrants.exceptions import (
    NoGranteesSpecifiedError,
    QueryError,
    StatementError,
    UnknownGrantTypeError,
)


# =============================================================================
# Exception Class Tests
# =============================================================================


class TestNoGranteesSpecifiedError:
    def test_message_is_preserved(self):
        exc = NoGranteesSpecifiedError("No users or roles specified")
        assert str(exc) == "No users or roles specified"

    def test_is_value_error(self):
        assert isinstance(NoGranteesSpecifiedError("x"), ValueError)


class TestQueryError:
    def test_carries_sql(self):
        exc = QueryError("failed", sql='SHOW GRANTS OF ROLE "r"')
        assert str(exc) == "failed"
        assert exc.sql == 'SHOW GRANTS OF ROLE "r"'

    def test_sql_is_optional(self):
        assert QueryError("failed").sql is None


class TestUnknownGrantTypeError:
    def test_message_names_type(self):
        exc = UnknownGrantTypeError("DATABASE")
        assert exc.granted_to == "DATABASE"
        assert "DATABASE" in str(exc)


class TestStatementError:
    def test_carries_sql_and_errno(self):
        exc = StatementError("denied", sql='GRANT ROLE "a" TO USER "b"', errno=3001)
        assert str(exc) == "denied"
        assert exc.sql == 'GRANT ROLE "a" TO USER "b"'
        assert exc.errno == 3001

    def test_can_be_chained(self):
        with pytest.raises(StatementError) as exc_info:
            try:
                raise RuntimeError("driver failure")
            except RuntimeError as err:
                raise StatementError("denied", sql="DROP NETWORK POLICY p") from err
        assert isinstance(exc_info.value.__cause__, RuntimeError)


# =============================================================================
# Enum parsing
# =============================================================================


class TestGranteeType:
    @pytest.mark.parametrize("value", ["ROLE", "role", "Role"])
    def test_role(self, value):
        assert GranteeType.from_granted_to(value) == GranteeType.ROLE

    @pytest.mark.parametrize("value", ["USER", "user", "uSeR"])
    def test_user(self, value):
        assert GranteeType.from_granted_to(value) == GranteeType.USER

    @pytest.mark.parametrize("value", ["DATABASE", "DATABASE_ROLE", "SHARE", "", None])
    def test_unknown(self, value):
        with pytest.raises(UnknownGrantTypeError):
            GranteeType.from_granted_to(value)

    def test_str(self):
        assert str(GranteeType.ROLE) == "ROLE"
        assert f"{GranteeType.USER}" == "USER"


class TestParseableEnums:
    def test_parse_is_case_insensitive(self):
        assert GrantAction.parse("revoke") == GrantAction.REVOKE
        assert IpListKind.parse("blocked") == IpListKind.BLOCKED

    def test_parse_returns_members_unchanged(self):
        assert IpListKind.parse(IpListKind.ALLOWED) is IpListKind.ALLOWED

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValueError):
            IpListKind.parse("DENIED")
