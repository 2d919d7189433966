"""Built-in hooks that attach access tokens to users and posts.

These hooks translate host lifecycle events into TokenEventHandler calls.
They are registered as built-in, stop-on-error hooks with a high priority
so that user hooks running later on the same event already see the token
in the hook data.
"""

from typing import Any, Optional

from flowtokens.core.hooks.hook_events import HookEvent
from flowtokens.core.hooks.hook_registry import HookRegistry
from flowtokens.core.logging import get_logger
from flowtokens.domain.entities.access_token import TOKEN_META_KEY
from flowtokens.domain.entities.entity_kind import EntityKind
from flowtokens.domain.entities.hook_context import HookContext
from flowtokens.domain.services.token_event_handler import TokenEventHandler

logger = get_logger(__name__)

TOKEN_HOOK_PRIORITY = 100


class TokenHooks:
    """Hook callbacks bound to one TokenEventHandler."""

    def __init__(self, handler: TokenEventHandler) -> None:
        self.handler = handler

    async def user_created(
        self,
        event: str,
        data: Optional[dict[str, Any]],
        context: Optional[HookContext],
    ) -> Optional[dict[str, Any]]:
        """Issue a token for a newly registered user."""
        if data is None:
            return data
        token = await self.handler.on_entity_created(EntityKind.USER, data["id"])
        return _with_token(data, token)

    async def user_updated(
        self,
        event: str,
        data: Optional[dict[str, Any]],
        context: Optional[HookContext],
    ) -> Optional[dict[str, Any]]:
        """Issue a token for an updated user that does not have one yet."""
        if data is None:
            return data
        token = await self.handler.on_entity_saved(EntityKind.USER, data["id"], update=True)
        return _with_token(data, token)

    async def post_saved(
        self,
        event: str,
        data: Optional[dict[str, Any]],
        context: Optional[HookContext],
    ) -> Optional[dict[str, Any]]:
        """Issue a token for a saved post of a tracked type."""
        if data is None:
            return data
        token = await self.handler.on_entity_saved(
            EntityKind.POST,
            data["id"],
            post_type=data.get("post_type"),
            update=bool(data.get("update", True)),
        )
        return _with_token(data, token)


def _with_token(data: dict[str, Any], token: str | None) -> dict[str, Any]:
    if token is None:
        return data
    return {**data, TOKEN_META_KEY: token}


def register_token_hooks(registry: HookRegistry, handler: TokenEventHandler) -> list[str]:
    """Register the access token hooks.

    Args:
        registry: The HookRegistry to register hooks with.
        handler: Handler holding the token rules.

    Returns:
        List of registered hook IDs.
    """
    hooks = TokenHooks(handler)
    hook_ids = [
        registry.register(
            event=HookEvent.ON_USER_AFTER_CREATE,
            callback=hooks.user_created,
            priority=TOKEN_HOOK_PRIORITY,
            stop_on_error=True,
            is_builtin=True,
        ),
        registry.register(
            event=HookEvent.ON_USER_AFTER_UPDATE,
            callback=hooks.user_updated,
            priority=TOKEN_HOOK_PRIORITY,
            stop_on_error=True,
            is_builtin=True,
        ),
        registry.register(
            event=HookEvent.ON_POST_AFTER_SAVE,
            callback=hooks.post_saved,
            priority=TOKEN_HOOK_PRIORITY,
            stop_on_error=True,
            is_builtin=True,
        ),
    ]

    logger.info("Token hooks registered", hook_count=len(hook_ids), hook_ids=hook_ids)
    return hook_ids
