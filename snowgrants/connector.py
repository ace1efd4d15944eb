import logging
import os

import click
import snowflake.connector
from snowflake.connector.connection import SnowflakeConnection
from snowflake.connector.errors import DatabaseError, ForbiddenError

logger = logging.getLogger("snowgrants")

APPLICATION_NAME = "snowgrants"

_ENV_VARS = {
    "SNOWFLAKE_ACCOUNT": "account",
    "SNOWFLAKE_USER": "user",
    "SNOWFLAKE_PASSWORD": "password",
    "SNOWFLAKE_DATABASE": "database",
    "SNOWFLAKE_SCHEMA": "schema",
    "SNOWFLAKE_ROLE": "role",
    "SNOWFLAKE_WAREHOUSE": "warehouse",
    "SNOWFLAKE_AUTHENTICATOR": "authenticator",
    "SNOWFLAKE_MFA_PASSCODE": "mfa_passcode",
}


class InvalidConnectionConfiguration(click.ClickException):
    def format_message(self):
        return f"Invalid connection configuration. {self.message}"


class SnowflakeConnectionError(click.ClickException):
    def __init__(self, snowflake_err: Exception):
        super().__init__(f"Could not connect to Snowflake. Reason: {snowflake_err}")


def get_env_vars() -> dict:
    env_vars = {}
    for env_var, param in _ENV_VARS.items():
        value = os.environ.get(env_var)
        if value:
            env_vars[param] = value
    return env_vars


def connect(**kwargs) -> SnowflakeConnection:
    """
    Open a Snowflake connection.

    Connection parameters are read from SNOWFLAKE_* environment variables and
    overridden by any keyword arguments that are not None.
    """
    connection_params = get_env_vars()
    connection_params.update({k: v for k, v in kwargs.items() if v is not None})

    if "mfa_passcode" in connection_params:
        connection_params["passcode"] = connection_params.pop("mfa_passcode")
    if connection_params.get("authenticator", "").lower() == "username_password_mfa":
        connection_params["client_request_mfa_token"] = True
    connection_params["application_name"] = APPLICATION_NAME

    try:
        logger.debug(f"Connecting to Snowflake account {connection_params.get('account')}")
        return snowflake.connector.connect(**connection_params)
    except ForbiddenError as err:
        raise SnowflakeConnectionError(err) from err
    except DatabaseError as err:
        raise InvalidConnectionConfiguration(err.msg) from err
