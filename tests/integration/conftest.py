import os
import uuid

import pytest

from snowgrants.client import execute
from snowgrants.connector import connect


@pytest.fixture(scope="session")
def session():
    if not os.environ.get("SNOWFLAKE_ACCOUNT"):
        pytest.skip("SNOWFLAKE_ACCOUNT is not set")
    conn = connect(role=os.environ.get("TEST_SNOWFLAKE_ROLE"))
    yield conn
    conn.close()


@pytest.fixture
def suffix():
    return uuid.uuid4().hex[:8].upper()


@pytest.fixture
def marked_for_cleanup(session):
    statements = []
    yield statements
    for sql in reversed(statements):
        execute(session, sql)
