"""Domain entities for Flow Tokens.

Entities are pure Python types that represent core concepts.
They have no dependencies on infrastructure or external frameworks.
"""

from flowtokens.domain.entities.access_token import (
    TOKEN_META_KEY,
    TOKEN_PATTERN,
    AccessToken,
)
from flowtokens.domain.entities.entity_kind import EntityKind
from flowtokens.domain.entities.hook_context import (
    AbortHookException,
    HookContext,
    HookResult,
)

__all__ = [
    "AbortHookException",
    "AccessToken",
    "EntityKind",
    "HookContext",
    "HookResult",
    "TOKEN_META_KEY",
    "TOKEN_PATTERN",
]
