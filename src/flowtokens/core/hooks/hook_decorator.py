"""Hook decorator API for user-friendly hook registration.

Enables the `@app.state.hook.on_post_after_save("act")` syntax on top of
the HookRegistry.
"""

from typing import Any, Callable, Optional, TypeVar

from flowtokens.core.hooks.hook_events import HookEvent
from flowtokens.core.hooks.hook_registry import HookRegistry

F = TypeVar("F", bound=Callable[..., Any])


class HookDecorator:
    """Provides decorator syntax for hook registration.

    Example:
        hook = HookDecorator(registry)

        @hook.on_post_after_save("job_sheet", priority=10)
        async def notify_crew(event, data, context):
            await send_link(data["flow_rand_tok"])
            return data
    """

    def __init__(self, registry: HookRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> HookRegistry:
        """Get the underlying hook registry."""
        return self._registry

    # App lifecycle

    def on_bootstrap(self, priority: int = 0, stop_on_error: bool = False) -> Callable[[F], F]:
        """Register a hook for application bootstrap, before serving requests."""
        return self._create_decorator(HookEvent.ON_BOOTSTRAP, None, priority, stop_on_error)

    def on_serve(self, priority: int = 0, stop_on_error: bool = False) -> Callable[[F], F]:
        """Register a hook for when the application is ready to serve."""
        return self._create_decorator(HookEvent.ON_SERVE, None, priority, stop_on_error)

    def on_terminate(self, priority: int = 0, stop_on_error: bool = False) -> Callable[[F], F]:
        """Register a hook for application shutdown."""
        return self._create_decorator(HookEvent.ON_TERMINATE, None, priority, stop_on_error)

    # Users

    def on_user_before_create(
        self, priority: int = 0, stop_on_error: bool = False
    ) -> Callable[[F], F]:
        """Register a hook that runs before a user is inserted.

        The hook may modify the user data or raise AbortHookException.
        """
        return self._create_decorator(
            HookEvent.ON_USER_BEFORE_CREATE, None, priority, stop_on_error
        )

    def on_user_after_create(
        self, priority: int = 0, stop_on_error: bool = False
    ) -> Callable[[F], F]:
        """Register a hook that runs after a user is registered."""
        return self._create_decorator(
            HookEvent.ON_USER_AFTER_CREATE, None, priority, stop_on_error
        )

    def on_user_before_update(
        self, priority: int = 0, stop_on_error: bool = False
    ) -> Callable[[F], F]:
        """Register a hook that runs before a user profile is updated."""
        return self._create_decorator(
            HookEvent.ON_USER_BEFORE_UPDATE, None, priority, stop_on_error
        )

    def on_user_after_update(
        self, priority: int = 0, stop_on_error: bool = False
    ) -> Callable[[F], F]:
        """Register a hook that runs after a user profile is updated."""
        return self._create_decorator(
            HookEvent.ON_USER_AFTER_UPDATE, None, priority, stop_on_error
        )

    # Posts

    def on_post_before_save(
        self,
        post_type: Optional[str] = None,
        priority: int = 0,
        stop_on_error: bool = False,
    ) -> Callable[[F], F]:
        """Register a hook that runs before a post is inserted or updated.

        Args:
            post_type: Only fire for posts of this type.
            priority: Execution priority (higher = earlier).
            stop_on_error: Abort chain on error.
        """
        return self._create_decorator(
            HookEvent.ON_POST_BEFORE_SAVE, post_type, priority, stop_on_error
        )

    def on_post_after_save(
        self,
        post_type: Optional[str] = None,
        priority: int = 0,
        stop_on_error: bool = False,
    ) -> Callable[[F], F]:
        """Register a hook that runs after a post is saved.

        The hook data carries ``update`` (False for a new post).

        Example:
            @hook.on_post_after_save("act")
            async def announce(event, data, context):
                if not data["update"]:
                    await publish(data["id"])
                return data
        """
        return self._create_decorator(
            HookEvent.ON_POST_AFTER_SAVE, post_type, priority, stop_on_error
        )

    def _create_decorator(
        self,
        event: str,
        post_type: Optional[str],
        priority: int,
        stop_on_error: bool,
    ) -> Callable[[F], F]:
        def decorator(func: F) -> F:
            filters = {"post_type": post_type} if post_type else {}
            self._registry.register(
                event=event,
                callback=func,
                filters=filters,
                priority=priority,
                stop_on_error=stop_on_error,
            )
            return func

        return decorator
