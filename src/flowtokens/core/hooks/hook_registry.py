"""Hook registry - central hook registration and execution engine.

The registry is how the host application tells the token services that a
user or post changed. It provides:
- Registration of hooks with tag filters and priority
- Execution of hooks in priority order
- Abort handling for before-hooks
- Error collection and logging
"""

import inspect
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from flowtokens.core.logging import get_logger
from flowtokens.domain.entities.hook_context import (
    AbortHookException,
    HookContext,
    HookResult,
)

logger = get_logger(__name__)


@dataclass
class RegisteredHook:
    """Internal representation of a registered hook.

    Attributes:
        id: Unique identifier for this hook registration.
        event: The event this hook is registered for.
        callback: The function to call with (event, data, context).
        filters: Tag-based filters (e.g., {"post_type": "act"}).
        priority: Execution priority (higher = earlier).
        stop_on_error: Whether errors should abort the chain.
        is_builtin: Whether this is a built-in system hook.
        registration_order: Order in which this hook was registered.
    """

    id: str
    event: str
    callback: Callable
    filters: dict[str, Any] = field(default_factory=dict)
    priority: int = 0
    stop_on_error: bool = False
    is_builtin: bool = False
    registration_order: int = 0

    def matches(self, filters: Optional[dict[str, Any]]) -> bool:
        """Check whether this hook should fire for the given trigger filters.

        A hook without filters, or a trigger without filters, always matches.
        Otherwise every one of the hook's filter keys must be present in
        the trigger filters with the same value.
        """
        if not self.filters or not filters:
            return True
        return all(
            filters.get(key) is not None and filters.get(key) == value
            for key, value in self.filters.items()
        )


class HookRegistry:
    """Central hook registration and execution engine.

    Example:
        registry = HookRegistry()

        hook_id = registry.register(
            event=HookEvent.ON_POST_AFTER_SAVE,
            callback=notify_editors,
            filters={"post_type": "act"},
            priority=10,
        )

        result = await registry.trigger(
            event=HookEvent.ON_POST_AFTER_SAVE,
            data={"id": 7, "post_type": "act", "update": False},
            filters={"post_type": "act"},
        )

        registry.unregister(hook_id)
    """

    def __init__(self) -> None:
        self._hooks: dict[str, list[RegisteredHook]] = {}
        self._hook_map: dict[str, RegisteredHook] = {}
        self._registration_counter: int = 0

    def register(
        self,
        event: str,
        callback: Callable,
        filters: Optional[dict[str, Any]] = None,
        priority: int = 0,
        stop_on_error: bool = False,
        is_builtin: bool = False,
    ) -> str:
        """Register a hook for an event.

        Args:
            event: Hook event name (e.g., "on_post_after_save").
            callback: Function accepting (event, data, context). May be async.
                      A returned dict replaces the data for later hooks.
            filters: Optional tag-based filters. The hook only fires if all
                     filter conditions match the trigger filters.
            priority: Execution priority. Higher priority hooks run first.
            stop_on_error: If True, errors in this hook abort the chain.
            is_builtin: If True, this hook cannot be unregistered.

        Returns:
            Unique hook_id string for later removal.
        """
        hook_id = f"hook_{uuid.uuid4().hex[:12]}"
        self._registration_counter += 1

        hook = RegisteredHook(
            id=hook_id,
            event=event,
            callback=callback,
            filters=filters or {},
            priority=priority,
            stop_on_error=stop_on_error,
            is_builtin=is_builtin,
            registration_order=self._registration_counter,
        )
        self._hooks.setdefault(event, []).append(hook)
        self._hook_map[hook_id] = hook

        logger.debug(
            "Hook registered",
            hook_id=hook_id,
            hook_event=event,
            priority=priority,
            filters=filters,
            is_builtin=is_builtin,
        )
        return hook_id

    def unregister(self, hook_id: str) -> bool:
        """Remove a registered hook.

        Returns:
            True if hook was removed, False if not found or is built-in.
        """
        hook = self._hook_map.get(hook_id)
        if hook is None:
            logger.warning("Hook not found for unregister", hook_id=hook_id)
            return False

        if hook.is_builtin:
            logger.warning(
                "Cannot unregister built-in hook",
                hook_id=hook_id,
                hook_event=hook.event,
            )
            return False

        remaining = [h for h in self._hooks.get(hook.event, []) if h.id != hook_id]
        if remaining:
            self._hooks[hook.event] = remaining
        else:
            self._hooks.pop(hook.event, None)
        del self._hook_map[hook_id]

        logger.debug("Hook unregistered", hook_id=hook_id, hook_event=hook.event)
        return True

    async def trigger(
        self,
        event: str,
        data: Optional[dict[str, Any]] = None,
        context: Optional[HookContext] = None,
        filters: Optional[dict[str, Any]] = None,
    ) -> HookResult:
        """Execute all registered hooks for an event.

        Hooks run in priority order (higher first), then registration order.

        Args:
            event: Hook event name.
            data: Data passed to each hook. A hook returning a dict replaces it.
            context: HookContext with app and request info.
            filters: Trigger-time filters used to select hooks.

        Returns:
            HookResult with success status, any errors, and final data.
        """
        result = HookResult(success=True, data=data)

        hooks = [h for h in self._hooks.get(event, []) if h.matches(filters)]
        if not hooks:
            return result

        hooks.sort(key=lambda h: (-h.priority, h.registration_order))

        logger.debug(
            "Triggering hooks",
            hook_event=event,
            hook_count=len(hooks),
            filters=filters,
        )

        current_data = data
        for hook in hooks:
            try:
                returned = await self._execute_hook(hook, event, current_data, context)
                if isinstance(returned, dict):
                    current_data = returned
                    result.data = current_data

            except AbortHookException as e:
                logger.info(
                    "Hook aborted operation",
                    hook_id=hook.id,
                    hook_event=event,
                    request_id=context.request_id if context else None,
                    reason=e.message,
                    status_code=e.status_code,
                )
                result.success = False
                result.aborted = True
                result.abort_message = e.message
                result.abort_status_code = e.status_code
                return result

            except Exception as e:
                logger.error(
                    "Hook execution failed",
                    hook_id=hook.id,
                    hook_event=event,
                    request_id=context.request_id if context else None,
                    error=str(e),
                    error_type=type(e).__name__,
                    stop_on_error=hook.stop_on_error,
                )
                result.errors.append(f"Hook {hook.id} failed: {e}")

                if hook.stop_on_error:
                    result.success = False
                    return result

        return result

    async def _execute_hook(
        self,
        hook: RegisteredHook,
        event: str,
        data: Optional[dict[str, Any]],
        context: Optional[HookContext],
    ) -> Any:
        """Call a hook, awaiting it when it is a coroutine function."""
        if inspect.iscoroutinefunction(hook.callback):
            return await hook.callback(event, data, context)

        logger.warning(
            "Hook callback is not async, calling directly",
            hook_id=hook.id,
            hook_event=event,
        )
        return hook.callback(event, data, context)

    def get_hooks_for_event(self, event: str) -> list[RegisteredHook]:
        """Get all hooks registered for an event."""
        return list(self._hooks.get(event, []))

    def get_hook_by_id(self, hook_id: str) -> Optional[RegisteredHook]:
        """Get a hook by its ID."""
        return self._hook_map.get(hook_id)

    def clear(self, include_builtin: bool = False) -> int:
        """Remove all registered hooks.

        Args:
            include_builtin: If True, also remove built-in hooks.

        Returns:
            Number of hooks removed.
        """
        if include_builtin:
            count = len(self._hook_map)
            self._hooks.clear()
            self._hook_map.clear()
        else:
            to_remove = [h.id for h in self._hook_map.values() if not h.is_builtin]
            for hook_id in to_remove:
                self.unregister(hook_id)
            count = len(to_remove)

        logger.debug("Hooks cleared", count=count, include_builtin=include_builtin)
        return count
