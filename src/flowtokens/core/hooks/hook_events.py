"""Hook event definitions and categories.

This module defines all hook events that Flow Tokens fires.

IMPORTANT: Adding new events is allowed (non-breaking), but
           removing or renaming events is a breaking change.
"""


class HookCategory:
    """Categories for organizing hooks."""

    APP_LIFECYCLE = "app_lifecycle"
    USER_OPERATIONS = "user_operations"
    POST_OPERATIONS = "post_operations"


class HookEvent:
    """Hook event names.

    Each event follows a consistent naming pattern:
    - before_* events can modify data or abort the operation
    - after_* events are called after the change is committed

    Attributes in format: ON_<ENTITY>_<TIMING>_<OPERATION>
    """

    # App Lifecycle Events
    ON_BOOTSTRAP = "on_bootstrap"  # App starting, before serving
    ON_SERVE = "on_serve"  # App ready to serve requests
    ON_TERMINATE = "on_terminate"  # App shutting down

    # User Operations
    ON_USER_BEFORE_CREATE = "on_user_before_create"
    ON_USER_AFTER_CREATE = "on_user_after_create"
    ON_USER_BEFORE_UPDATE = "on_user_before_update"
    ON_USER_AFTER_UPDATE = "on_user_after_update"

    # Post Operations (fired for both inserts and updates, data carries "update")
    ON_POST_BEFORE_SAVE = "on_post_before_save"
    ON_POST_AFTER_SAVE = "on_post_after_save"


EVENT_CATEGORIES: dict[str, str] = {
    HookEvent.ON_BOOTSTRAP: HookCategory.APP_LIFECYCLE,
    HookEvent.ON_SERVE: HookCategory.APP_LIFECYCLE,
    HookEvent.ON_TERMINATE: HookCategory.APP_LIFECYCLE,
    HookEvent.ON_USER_BEFORE_CREATE: HookCategory.USER_OPERATIONS,
    HookEvent.ON_USER_AFTER_CREATE: HookCategory.USER_OPERATIONS,
    HookEvent.ON_USER_BEFORE_UPDATE: HookCategory.USER_OPERATIONS,
    HookEvent.ON_USER_AFTER_UPDATE: HookCategory.USER_OPERATIONS,
    HookEvent.ON_POST_BEFORE_SAVE: HookCategory.POST_OPERATIONS,
    HookEvent.ON_POST_AFTER_SAVE: HookCategory.POST_OPERATIONS,
}


def get_all_events() -> list[str]:
    """Get all available hook event names."""
    return [
        value
        for name, value in vars(HookEvent).items()
        if not name.startswith("_") and isinstance(value, str)
    ]


def is_before_event(event: str) -> bool:
    """Check if an event is a 'before' event (can modify data/abort)."""
    return "before" in event.lower()


def is_after_event(event: str) -> bool:
    """Check if an event is an 'after' event."""
    return "after" in event.lower()
