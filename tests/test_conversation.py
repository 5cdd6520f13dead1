"""Tests for conversation state and step events."""

import asyncio

import pytest

from flowlynk.models import Message, Role, Step
from flowlynk.orchestration import ConversationState, StepEvents


class TestConversationState:
    def test_seeded_with_system_message(self):
        state = ConversationState("system text")
        messages = state.messages()
        assert len(messages) == 1
        assert messages[0] == Message(role=Role.SYSTEM, content="system text")
        assert state.message_log() == []

    def test_append_accepts_role_strings(self):
        state = ConversationState("sys")
        state.append_message("user", "hi")
        state.append_message(Role.ASSISTANT, "hello")
        assert [m.role for m in state.message_log()] == [Role.USER, Role.ASSISTANT]

    def test_append_rejects_unknown_role(self):
        state = ConversationState("sys")
        with pytest.raises(ValueError):
            state.append_message("tool", "x")

    def test_history_follows_system_message(self):
        history = [Message(role=Role.USER, content="earlier")]
        state = ConversationState("sys", history)
        assert state.message_log() == history

    def test_history_rejects_system_messages(self):
        with pytest.raises(ValueError):
            ConversationState("sys", [Message(role=Role.SYSTEM, content="again")])

    def test_reset_reseeds(self):
        state = ConversationState("old", [Message(role=Role.USER, content="earlier")])
        state.append_message("user", "hi")
        state.reset("new")
        assert len(state) == 1
        assert state.messages()[0].content == "new"

    def test_snapshots_are_copies(self):
        state = ConversationState("sys")
        log = state.message_log()
        log.append(Message(role=Role.USER, content="sneaky"))
        assert state.message_log() == []

    def test_as_payload(self):
        state = ConversationState("sys")
        state.append_message("user", "hi")
        assert state.as_payload() == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "hi"},
        ]


class TestStepEvents:
    def test_emit_order_and_await(self):
        events = StepEvents()
        seen = []

        def sync_observer(step):
            seen.append(("sync", step.content))

        async def async_observer(step):
            await asyncio.sleep(0)
            seen.append(("async", step.content))

        events.subscribe(sync_observer)
        events.subscribe(async_observer)
        asyncio.run(events.emit(Step.output("a"), extra=lambda s: seen.append(("extra", s.content))))

        assert seen == [("sync", "a"), ("async", "a"), ("extra", "a")]

    def test_failing_observer_does_not_stop_others(self):
        events = StepEvents()
        seen = []

        def broken(step):
            raise RuntimeError("observer bug")

        events.subscribe(broken)
        events.subscribe(lambda step: seen.append(step.content))
        asyncio.run(events.emit(Step.output("a")))

        assert seen == ["a"]

    def test_unsubscribe(self):
        events = StepEvents()
        observer = lambda step: None  # noqa: E731
        events.subscribe(observer)
        events.unsubscribe(observer)
        events.unsubscribe(observer)
        assert len(events) == 0
