"""Access token entity.

An access token is an opaque, URL-safe string stored as a meta row
against the user or post that owns it.
"""

import re
from dataclasses import dataclass

from flowtokens.domain.entities.entity_kind import EntityKind

# Meta key every access token is stored under, for users and posts alike
TOKEN_META_KEY = "flow_rand_tok"

# Unpadded URL-safe base64 alphabet
TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass(frozen=True)
class AccessToken:
    """A token and the entity that owns it."""

    kind: EntityKind
    entity_id: int
    token: str

    @staticmethod
    def is_well_formed(token: str) -> bool:
        """Check that a string only uses the token alphabet."""
        return isinstance(token, str) and bool(TOKEN_PATTERN.match(token))
