"""Infrastructure hooks module.

Contains built-in hooks and hook registration utilities.
"""

from flowtokens.infrastructure.hooks.token_hooks import (
    TOKEN_HOOK_PRIORITY,
    TokenHooks,
    register_token_hooks,
)

__all__ = [
    "TOKEN_HOOK_PRIORITY",
    "TokenHooks",
    "register_token_hooks",
]
