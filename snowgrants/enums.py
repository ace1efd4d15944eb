from enum import Enum

from .exceptions import UnknownGrantTypeError


class ParseableEnum(str, Enum):
    @classmethod
    def parse(cls, value: str):
        if isinstance(value, cls):
            return value
        return cls(value.upper())

    def __str__(self):
        return self.value


class GranteeType(ParseableEnum):
    ROLE = "ROLE"
    USER = "USER"

    @classmethod
    def from_granted_to(cls, granted_to: str) -> "GranteeType":
        """Classify the `granted_to` column of SHOW GRANTS OF ROLE, case-insensitively."""
        try:
            return cls.parse(granted_to)
        except (ValueError, AttributeError) as err:
            raise UnknownGrantTypeError(granted_to) from err


class GrantAction(ParseableEnum):
    GRANT = "GRANT"
    REVOKE = "REVOKE"


class IpListKind(ParseableEnum):
    ALLOWED = "ALLOWED"
    BLOCKED = "BLOCKED"
