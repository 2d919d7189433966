"""Entity kinds that can own an access token."""

from enum import Enum

from flowtokens.core.exceptions import UnknownEntityKindError


class EntityKind(str, Enum):
    """Kind of record a token is attached to.

    Each kind has its own meta table, so token uniqueness is enforced
    per kind and never across kinds.
    """

    USER = "user"
    POST = "post"

    @classmethod
    def parse(cls, value: "str | EntityKind") -> "EntityKind":
        """Resolve a kind from its string value.

        Raises:
            UnknownEntityKindError: If the value is not a known kind.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownEntityKindError(str(value)) from None
