"""Tests for EventBus and CancellationToken."""

import pytest

from story_linter.models.findings import Severity
from story_linter.services.events import CancellationToken, Event, EventBus, EventType


class TestEventBus:
    """Tests for event delivery."""

    @pytest.mark.asyncio
    async def test_sync_and_async_listeners(self) -> None:
        """Test both plain and coroutine listeners receive events in order."""
        bus = EventBus()
        received: list[str] = []

        def sync_listener(event: Event) -> None:
            received.append(f"sync:{event.data['file']}")

        async def async_listener(event: Event) -> None:
            received.append(f"async:{event.data['file']}")

        bus.subscribe(sync_listener)
        bus.subscribe(async_listener)

        diagnostics = await bus.emit(EventType.FILE_PARSE, file="/a.md")

        assert received == ["sync:/a.md", "async:/a.md"]
        assert diagnostics == []

    @pytest.mark.asyncio
    async def test_type_filter(self) -> None:
        """Test listeners can restrict the event types they receive."""
        bus = EventBus()
        received: list[EventType] = []
        bus.subscribe(lambda e: received.append(e.type), types=[EventType.RUN_END])

        await bus.emit(EventType.RUN_START, file_count=1)
        await bus.emit(EventType.RUN_END, passed=True)

        assert received == [EventType.RUN_END]

    @pytest.mark.asyncio
    async def test_unsubscribe(self) -> None:
        """Test the returned function removes the listener."""
        bus = EventBus()
        received: list[Event] = []
        unsubscribe = bus.subscribe(received.append)

        unsubscribe()
        unsubscribe()
        await bus.emit(EventType.RUN_START)

        assert received == []
        assert bus.listener_count == 0

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_stop_dispatch(self) -> None:
        """Test a raising listener yields BUS001 and later listeners still run."""
        bus = EventBus()
        received: list[Event] = []

        def broken(event: Event) -> None:
            raise RuntimeError("listener bug")

        bus.subscribe(broken)
        bus.subscribe(received.append)

        diagnostics = await bus.emit(EventType.RUN_START, file_count=2)

        assert len(received) == 1
        assert len(diagnostics) == 1
        assert diagnostics[0].code == "BUS001"
        assert diagnostics[0].severity is Severity.WARNING
        assert diagnostics[0].validator == "engine"

    @pytest.mark.asyncio
    async def test_event_data_is_read_only(self) -> None:
        """Test listeners cannot modify the payload."""
        bus = EventBus()

        def mutate(event: Event) -> None:
            event.data["file"] = "/other.md"  # type: ignore[index]

        bus.subscribe(mutate)
        diagnostics = await bus.emit(EventType.FILE_DONE, file="/a.md")

        assert [d.code for d in diagnostics] == ["BUS001"]

    @pytest.mark.asyncio
    async def test_payload_keys_may_shadow_parameters(self) -> None:
        """Test payload keys are free to reuse the emit parameter names."""
        bus = EventBus()
        received: list[Event] = []
        bus.subscribe(received.append)

        await bus.emit(EventType.FILE_DONE, event_type="custom", self=1)

        assert dict(received[0].data) == {"event_type": "custom", "self": 1}
        assert received[0].type == EventType.FILE_DONE


class TestCancellationToken:
    """Tests for CancellationToken."""

    @pytest.mark.asyncio
    async def test_cancel(self) -> None:
        """Test cancellation is observable."""
        token = CancellationToken()
        assert not token.cancelled
        token.cancel()
        assert token.cancelled
        await token.wait()
