# chat_backend/infrastructure/event_dispatcher.py
from collections import defaultdict
from collections.abc import Awaitable, Callable

from chat_backend.domain.events import Event

EventHandler = Callable[[Event], Awaitable[None]]


class EventDispatcher:
    def __init__(self) -> None:
        self.handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def register(self, event_type: str | type[Event], handler: EventHandler) -> None:
        if isinstance(event_type, type):
            event_type = event_type.__name__
        self.handlers[event_type].append(handler)

    async def dispatch(self, event: Event) -> None:
        for handler in self.handlers[event.__class__.__name__]:
            await handler(event)
