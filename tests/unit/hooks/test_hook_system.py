"""Unit tests for the hook system.

Tests cover:
- Hook registration and unregistration
- Priority ordering
- post_type filtering
- AbortHookException handling
- Error handling and stop_on_error
- The decorator API
"""

import pytest

from flowtokens.core.hooks import (
    EVENT_CATEGORIES,
    HookCategory,
    HookDecorator,
    HookEvent,
    HookRegistry,
    get_all_events,
    is_after_event,
    is_before_event,
)
from flowtokens.domain.entities.hook_context import (
    AbortHookException,
    HookContext,
    HookResult,
)


async def passthrough(event, data, context):
    return data


class TestHookRegistry:
    """Tests for registration bookkeeping."""

    def test_register_returns_unique_ids(self) -> None:
        registry = HookRegistry()

        hook_ids = [registry.register(HookEvent.ON_POST_AFTER_SAVE, passthrough) for _ in range(10)]

        assert len(set(hook_ids)) == 10
        assert all(hook_id.startswith("hook_") for hook_id in hook_ids)

    def test_register_stores_options(self) -> None:
        registry = HookRegistry()

        hook_id = registry.register(
            event=HookEvent.ON_POST_AFTER_SAVE,
            callback=passthrough,
            filters={"post_type": "act"},
            priority=10,
            stop_on_error=True,
        )

        hook = registry.get_hook_by_id(hook_id)
        assert hook.filters == {"post_type": "act"}
        assert hook.priority == 10
        assert hook.stop_on_error is True
        assert hook.is_builtin is False

    def test_unregister(self) -> None:
        registry = HookRegistry()
        hook_id = registry.register(HookEvent.ON_USER_AFTER_CREATE, passthrough)

        assert registry.unregister(hook_id) is True
        assert registry.get_hook_by_id(hook_id) is None
        assert registry.get_hooks_for_event(HookEvent.ON_USER_AFTER_CREATE) == []

    def test_unregister_unknown_id(self) -> None:
        assert HookRegistry().unregister("hook_doesnotexist") is False

    def test_builtin_hooks_cannot_be_unregistered(self) -> None:
        registry = HookRegistry()
        hook_id = registry.register(HookEvent.ON_USER_AFTER_CREATE, passthrough, is_builtin=True)

        assert registry.unregister(hook_id) is False
        assert registry.get_hook_by_id(hook_id) is not None

    def test_clear_keeps_builtin_hooks(self) -> None:
        registry = HookRegistry()
        builtin_id = registry.register(HookEvent.ON_USER_AFTER_CREATE, passthrough, is_builtin=True)
        registry.register(HookEvent.ON_USER_AFTER_CREATE, passthrough)
        registry.register(HookEvent.ON_POST_AFTER_SAVE, passthrough)

        assert registry.clear() == 2
        assert [h.id for h in registry.get_hooks_for_event(HookEvent.ON_USER_AFTER_CREATE)] == [
            builtin_id
        ]

        assert registry.clear(include_builtin=True) == 1
        assert registry.get_hook_by_id(builtin_id) is None


class TestHookRegistryTrigger:
    """Tests for HookRegistry.trigger()."""

    @pytest.mark.asyncio
    async def test_trigger_without_hooks(self) -> None:
        result = await HookRegistry().trigger(HookEvent.ON_POST_AFTER_SAVE, {"id": 1})

        assert result.success is True
        assert result.data == {"id": 1}

    @pytest.mark.asyncio
    async def test_priority_then_registration_order(self) -> None:
        registry = HookRegistry()
        order = []

        def recorder(name):
            async def hook(event, data, context):
                order.append(name)
                return data

            return hook

        registry.register(HookEvent.ON_USER_BEFORE_CREATE, recorder("low"), priority=1)
        registry.register(HookEvent.ON_USER_BEFORE_CREATE, recorder("high-a"), priority=100)
        registry.register(HookEvent.ON_USER_BEFORE_CREATE, recorder("mid"), priority=50)
        registry.register(HookEvent.ON_USER_BEFORE_CREATE, recorder("high-b"), priority=100)

        await registry.trigger(HookEvent.ON_USER_BEFORE_CREATE, {})

        assert order == ["high-a", "high-b", "mid", "low"]

    @pytest.mark.asyncio
    async def test_returned_dict_replaces_data(self) -> None:
        registry = HookRegistry()
        seen = []

        async def add_token(event, data, context):
            return {**data, "flow_rand_tok": "abc"}

        async def observer(event, data, context):
            seen.append(dict(data))

        registry.register(HookEvent.ON_POST_AFTER_SAVE, add_token, priority=10)
        registry.register(HookEvent.ON_POST_AFTER_SAVE, observer)

        result = await registry.trigger(HookEvent.ON_POST_AFTER_SAVE, {"id": 7})

        assert seen == [{"id": 7, "flow_rand_tok": "abc"}]
        assert result.data == {"id": 7, "flow_rand_tok": "abc"}

    @pytest.mark.asyncio
    async def test_sync_callbacks_are_supported(self) -> None:
        registry = HookRegistry()

        def sync_hook(event, data, context):
            return {**data, "sync": True}

        registry.register(HookEvent.ON_USER_AFTER_UPDATE, sync_hook)

        result = await registry.trigger(HookEvent.ON_USER_AFTER_UPDATE, {"id": 1})

        assert result.data["sync"] is True

    @pytest.mark.asyncio
    async def test_context_is_passed_through(self) -> None:
        registry = HookRegistry()
        received = []

        async def hook(event, data, context):
            received.append(context)

        registry.register(HookEvent.ON_BOOTSTRAP, hook)
        context = HookContext(request_id="req_1")

        await registry.trigger(HookEvent.ON_BOOTSTRAP, context=context)

        assert received == [context]


class TestHookRegistryFiltering:
    """Tests for post_type filters."""

    @pytest.mark.asyncio
    async def test_only_matching_post_type_fires(self) -> None:
        registry = HookRegistry()
        executed = []

        async def act_hook(event, data, context):
            executed.append("act")

        async def sheet_hook(event, data, context):
            executed.append("job_sheet")

        registry.register(HookEvent.ON_POST_AFTER_SAVE, act_hook, filters={"post_type": "act"})
        registry.register(
            HookEvent.ON_POST_AFTER_SAVE, sheet_hook, filters={"post_type": "job_sheet"}
        )

        await registry.trigger(HookEvent.ON_POST_AFTER_SAVE, {}, filters={"post_type": "act"})

        assert executed == ["act"]

    @pytest.mark.asyncio
    async def test_unfiltered_hook_fires_for_every_post_type(self) -> None:
        registry = HookRegistry()
        executed = []

        async def any_hook(event, data, context):
            executed.append(data["post_type"])

        registry.register(HookEvent.ON_POST_AFTER_SAVE, any_hook)

        for post_type in ("act", "page"):
            await registry.trigger(
                HookEvent.ON_POST_AFTER_SAVE,
                {"post_type": post_type},
                filters={"post_type": post_type},
            )

        assert executed == ["act", "page"]


class TestHookRegistryErrorHandling:
    """Tests for aborts and errors."""

    @pytest.mark.asyncio
    async def test_abort_cancels_and_stops_chain(self) -> None:
        registry = HookRegistry()
        executed = []

        async def guard(event, data, context):
            raise AbortHookException("Acts need a title", 422)

        async def later(event, data, context):
            executed.append("later")

        registry.register(HookEvent.ON_POST_BEFORE_SAVE, guard, priority=10)
        registry.register(HookEvent.ON_POST_BEFORE_SAVE, later)

        result = await registry.trigger(HookEvent.ON_POST_BEFORE_SAVE, {})

        assert result.success is False
        assert result.aborted is True
        assert result.abort_message == "Acts need a title"
        assert result.abort_status_code == 422
        assert executed == []

    @pytest.mark.asyncio
    async def test_error_is_collected_and_chain_continues(self) -> None:
        registry = HookRegistry()
        executed = []

        async def broken(event, data, context):
            raise ValueError("boom")

        async def later(event, data, context):
            executed.append("later")

        registry.register(HookEvent.ON_USER_AFTER_CREATE, broken, priority=10)
        registry.register(HookEvent.ON_USER_AFTER_CREATE, later)

        result = await registry.trigger(HookEvent.ON_USER_AFTER_CREATE, {})

        assert result.success is True
        assert len(result.errors) == 1
        assert "boom" in result.errors[0]
        assert executed == ["later"]

    @pytest.mark.asyncio
    async def test_stop_on_error_stops_chain(self) -> None:
        registry = HookRegistry()
        executed = []

        async def broken(event, data, context):
            raise RuntimeError("storage down")

        async def later(event, data, context):
            executed.append("later")

        registry.register(HookEvent.ON_USER_AFTER_CREATE, broken, priority=10, stop_on_error=True)
        registry.register(HookEvent.ON_USER_AFTER_CREATE, later)

        result = await registry.trigger(HookEvent.ON_USER_AFTER_CREATE, {})

        assert result.success is False
        assert result.aborted is False
        assert executed == []


class TestHookDecorator:
    """Tests for HookDecorator."""

    def test_post_type_filter(self) -> None:
        registry = HookRegistry()
        hook = HookDecorator(registry)

        @hook.on_post_after_save("act", priority=5)
        async def share_act(event, data, context):
            return data

        hooks = registry.get_hooks_for_event(HookEvent.ON_POST_AFTER_SAVE)
        assert len(hooks) == 1
        assert hooks[0].filters == {"post_type": "act"}
        assert hooks[0].priority == 5
        assert hooks[0].callback is share_act

    def test_unfiltered_post_hook(self) -> None:
        registry = HookRegistry()
        hook = HookDecorator(registry)

        @hook.on_post_before_save()
        async def validate(event, data, context):
            return data

        assert registry.get_hooks_for_event(HookEvent.ON_POST_BEFORE_SAVE)[0].filters == {}

    @pytest.mark.parametrize(
        "method,event",
        [
            ("on_bootstrap", HookEvent.ON_BOOTSTRAP),
            ("on_serve", HookEvent.ON_SERVE),
            ("on_terminate", HookEvent.ON_TERMINATE),
            ("on_user_before_create", HookEvent.ON_USER_BEFORE_CREATE),
            ("on_user_after_create", HookEvent.ON_USER_AFTER_CREATE),
            ("on_user_before_update", HookEvent.ON_USER_BEFORE_UPDATE),
            ("on_user_after_update", HookEvent.ON_USER_AFTER_UPDATE),
        ],
    )
    def test_event_decorators(self, method: str, event: str) -> None:
        registry = HookRegistry()
        hook = HookDecorator(registry)

        getattr(hook, method)()(passthrough)

        assert len(registry.get_hooks_for_event(event)) == 1


class TestHookEvents:
    """Tests for hook event definitions."""

    def test_all_events_are_categorized(self) -> None:
        events = get_all_events()

        assert len(events) == 9
        assert set(events) == set(EVENT_CATEGORIES)
        assert EVENT_CATEGORIES[HookEvent.ON_POST_AFTER_SAVE] == HookCategory.POST_OPERATIONS

    def test_before_and_after(self) -> None:
        assert is_before_event(HookEvent.ON_POST_BEFORE_SAVE)
        assert not is_before_event(HookEvent.ON_POST_AFTER_SAVE)
        assert is_after_event(HookEvent.ON_USER_AFTER_UPDATE)
        assert not is_after_event(HookEvent.ON_BOOTSTRAP)


class TestHookDataStructures:
    """Tests for HookContext, HookResult and AbortHookException."""

    def test_context_generates_request_id(self) -> None:
        context = HookContext()
        assert context.request_id.startswith("hk_")

    def test_context_keeps_given_request_id(self) -> None:
        assert HookContext(request_id="cid_123").request_id == "cid_123"

    def test_result_defaults(self) -> None:
        result = HookResult()
        assert result.success is True
        assert result.aborted is False
        assert result.errors == []

    def test_abort_default_status_code(self) -> None:
        exc = AbortHookException("nope")
        assert exc.status_code == 400
        assert str(exc) == "nope"
