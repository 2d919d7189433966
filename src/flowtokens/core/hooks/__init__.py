"""Hook system core module.

The host application fires lifecycle events for users and posts through
this registry; the token services subscribe to them.

Example usage:
    from flowtokens.core.hooks import HookRegistry, HookDecorator, HookEvent

    registry = HookRegistry()
    hook = HookDecorator(registry)

    @hook.on_post_after_save("act")
    async def share_act(event, data, context):
        await mail_link(data["flow_rand_tok"])
        return data
"""

from flowtokens.core.hooks.hook_decorator import HookDecorator
from flowtokens.core.hooks.hook_events import (
    EVENT_CATEGORIES,
    HookCategory,
    HookEvent,
    get_all_events,
    is_after_event,
    is_before_event,
)
from flowtokens.core.hooks.hook_registry import HookRegistry, RegisteredHook

__all__ = [
    "HookRegistry",
    "RegisteredHook",
    "HookDecorator",
    "HookCategory",
    "HookEvent",
    "EVENT_CATEGORIES",
    "get_all_events",
    "is_before_event",
    "is_after_event",
]
