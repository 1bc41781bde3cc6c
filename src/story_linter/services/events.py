"""Event bus and cancellation token for validation runs.

The bus is a synchronous publish/subscribe channel over a fixed
event vocabulary. Listeners may be plain callables or coroutine
functions; a failing listener never interrupts dispatch.
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from loguru import logger

from story_linter.errors import BusError
from story_linter.models.findings import Finding
from story_linter.services.diagnostics import finding_from_error


class EventType(StrEnum):
    """Lifecycle events emitted during a run."""

    RUN_START = "run:start"
    RUN_END = "run:end"
    FILE_PARSE = "file:parse"
    FILE_DONE = "file:done"
    VALIDATOR_START = "validator:start"
    VALIDATOR_DONE = "validator:done"
    FINDING = "finding"


@dataclass(frozen=True)
class Event:
    """A single event delivered to listeners."""

    type: EventType
    data: Mapping[str, Any] = field(default_factory=dict)


Listener = Callable[[Event], Awaitable[None] | None]


@dataclass(frozen=True)
class _Subscription:
    listener: Listener
    types: frozenset[EventType] | None


class EventBus:
    """
    Delivers events to listeners in subscription order.

    Listener failures are logged and returned to the emitter as
    ``engine``/``BUS001`` warning findings.
    """

    def __init__(self) -> None:
        """Initialize bus with no listeners."""
        self._subscriptions: list[_Subscription] = []

    def subscribe(
        self,
        listener: Listener,
        types: Iterable[EventType] | None = None,
    ) -> Callable[[], None]:
        """
        Register a listener.

        Args:
            listener: Callable receiving each Event; may return an awaitable.
            types: Restrict delivery to these event types (default: all).

        Returns:
            Function that removes the subscription.
        """
        subscription = _Subscription(listener, frozenset(types) if types is not None else None)
        self._subscriptions.append(subscription)

        def unsubscribe() -> None:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        """Number of registered listeners."""
        return len(self._subscriptions)

    async def emit(self, event_type: EventType, /, **data: Any) -> list[Finding]:
        """
        Deliver an event to every interested listener.

        Args:
            event_type: Event to emit.
            **data: Event payload.

        Returns:
            BUS001 findings for listeners that raised.
        """
        event = Event(type=event_type, data=MappingProxyType(data))
        diagnostics: list[Finding] = []

        for subscription in list(self._subscriptions):
            if subscription.types is not None and event_type not in subscription.types:
                continue
            try:
                result = subscription.listener(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                name = getattr(subscription.listener, "__qualname__", repr(subscription.listener))
                logger.opt(exception=e).warning("Listener {} failed on {}: {}", name, event_type, e)
                error = BusError(f"Listener {name} failed on '{event_type}': {e}", event_type)
                diagnostics.append(finding_from_error(error))

        return diagnostics


class CancellationToken:
    """Cooperative cancellation flag checked between files and validators."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """True once cancellation was requested."""
        return self._event.is_set()

    async def wait(self) -> None:
        """Wait until cancellation is requested."""
        await self._event.wait()
