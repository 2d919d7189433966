"""Domain services for Flow Tokens.

Services contain the token rules and orchestrate the meta store.
"""

from flowtokens.domain.services.token_event_handler import (
    DEFAULT_TRACKED_POST_TYPES,
    TokenEventHandler,
)
from flowtokens.domain.services.token_generator import (
    TokenGenerator,
    base64url_decode,
    base64url_encode,
)
from flowtokens.domain.services.token_issuer import TokenIssuer
from flowtokens.domain.services.token_lookup import TokenLookup

__all__ = [
    "DEFAULT_TRACKED_POST_TYPES",
    "TokenEventHandler",
    "TokenGenerator",
    "TokenIssuer",
    "TokenLookup",
    "base64url_decode",
    "base64url_encode",
]
