import logging
import time
from typing import Optional, Union

import snowflake.connector
from snowflake.connector.connection import SnowflakeConnection
from snowflake.connector.cursor import SnowflakeCursor
from snowflake.connector.errors import ProgrammingError

from .exceptions import StatementError

logger = logging.getLogger("snowgrants")

DOES_NOT_EXIST_ERR = 2003
ACCESS_CONTROL_ERR = 3001


def execute(
    conn_or_cursor: Union[SnowflakeConnection, SnowflakeCursor],
    sql: str,
    empty_response_codes: Optional[list[int]] = None,
) -> list:
    """
    Run a single literal SQL statement and return its rows as dicts.

    Statements are never batched or parameterized. Errors whose errno is listed in
    `empty_response_codes` are treated as an empty result, every other
    ProgrammingError is re-raised with the statement text attached.
    """
    if not isinstance(sql, str):
        raise TypeError(f"Unknown sql type: {type(sql)}, {sql}")

    if isinstance(conn_or_cursor, SnowflakeConnection):
        session = conn_or_cursor
        cur = session.cursor(snowflake.connector.DictCursor)
    elif isinstance(conn_or_cursor, SnowflakeCursor):
        session = conn_or_cursor.connection
        cur = conn_or_cursor
        cur._use_dict_result = True
    else:
        # Snowpark stored procedure connections don't subclass SnowflakeConnection
        session = conn_or_cursor
        cur = session.cursor(snowflake.connector.DictCursor)

    session_header = f"[{session.user}:{session.role}] > {sql}"

    start = time.time()
    try:
        cur.execute(sql)
        result = cur.fetchall()
        runtime = time.time() - start
        logger.warning(f"{session_header}    \033[94m({len(result)} rows, {runtime:.2f}s)\033[0m")
        return result
    except ProgrammingError as err:
        if empty_response_codes and err.errno in empty_response_codes:
            runtime = time.time() - start
            logger.warning(f"{session_header}    \033[94m(empty, {runtime:.2f}s)\033[0m")
            return []
        logger.error(f"{session_header}    \033[31m(err {err.errno}, {time.time() - start:.2f}s)\033[0m")
        raise ProgrammingError(f"{err} on {sql}", errno=err.errno) from err


def execute_statement(conn_or_cursor: Union[SnowflakeConnection, SnowflakeCursor], sql: str) -> list:
    """Run a state-changing statement, surfacing failures as StatementError."""
    try:
        return execute(conn_or_cursor, sql)
    except ProgrammingError as err:
        raise StatementError(str(err), sql=sql, errno=err.errno) from err
