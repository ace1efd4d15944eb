import re

from snowflake.connector.errors import ProgrammingError

from snowgrants.client import ACCESS_CONTROL_ERR

_SHOW_GRANTS_OF = re.compile(r'^SHOW GRANTS OF ROLE "(?P<role>[^"]*)"$')
_GRANT = re.compile(r'^GRANT ROLE "(?P<role>[^"]*)" TO (?P<kind>ROLE|USER) "(?P<name>[^"]*)"$')
_REVOKE = re.compile(r'^REVOKE ROLE "(?P<role>[^"]*)" FROM (?P<kind>ROLE|USER) "(?P<name>[^"]*)"$')


class FakeCursor:
    def __init__(self, warehouse):
        self.warehouse = warehouse
        self._result = []

    def execute(self, sql):
        self._result = self.warehouse.run(sql)

    def fetchall(self):
        return self._result


class FakeWarehouse:
    """
    In-memory stand-in for a Snowflake session that understands the role grant
    statements snowgrants issues. Every statement is recorded in `statements`.
    """

    user = "TESTUSER"
    role = "SECURITYADMIN"

    def __init__(self, grants=None, quote_names=False, granted_to_case=str.upper):
        # role name -> set of (kind, grantee name)
        self.grants = {role: set(pairs) for role, pairs in (grants or {}).items()}
        self.statements = []
        self.fail_on = set()
        self.extra_rows = {}
        self.quote_names = quote_names
        self.granted_to_case = granted_to_case

    def cursor(self, *args, **kwargs):
        return FakeCursor(self)

    @property
    def changes(self):
        return [sql for sql in self.statements if not sql.startswith("SHOW")]

    def observed(self, role):
        pairs = self.grants.get(role, set())
        return (
            {name for kind, name in pairs if kind == "ROLE"},
            {name for kind, name in pairs if kind == "USER"},
        )

    def run(self, sql):
        self.statements.append(sql)
        if sql in self.fail_on:
            raise ProgrammingError("Insufficient privileges to operate on role", errno=ACCESS_CONTROL_ERR)

        match = _SHOW_GRANTS_OF.match(sql)
        if match:
            role = match["role"]
            rows = [
                {
                    "created_on": "2024-01-01 00:00:00.000 -0800",
                    "role": role,
                    "granted_to": self.granted_to_case(kind),
                    "grantee_name": f'"{name}"' if self.quote_names else name,
                    "granted_by": "SECURITYADMIN",
                }
                for kind, name in sorted(self.grants.get(role, set()))
            ]
            return rows + self.extra_rows.get(role, [])

        match = _GRANT.match(sql)
        if match:
            self.grants.setdefault(match["role"], set()).add((match["kind"], match["name"]))
            return [{"status": "Statement executed successfully."}]

        match = _REVOKE.match(sql)
        if match:
            self.grants.setdefault(match["role"], set()).discard((match["kind"], match["name"]))
            return [{"status": "Statement executed successfully."}]

        raise ProgrammingError(f"SQL compilation error: unsupported statement {sql}", errno=1003)
