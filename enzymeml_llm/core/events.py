"""
Event emission for the tool-chain engine.

ChainContext holds the cross-cutting values (depth, model, identifiers)
and produces a fresh ChainMetadata snapshot for every emission. EventSink
delivers events to an optional observer callback synchronously; the
observer is never awaited and its exceptions are logged and swallowed.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable

from ..schemas.events import ChainEvent, ChainMetadata


logger = logging.getLogger(__name__)

ChainObserver = Callable[[ChainEvent], Any]


@dataclass(frozen=True)
class ChainContext:
    """Values shared by every event of one chain execution."""
    model: str
    depth: int = 1
    total_depth: int = 1
    conversation_id: str | None = None
    request_id: str | None = None

    def metadata(self) -> ChainMetadata:
        """Create a new metadata snapshot stamped with the current time."""
        return ChainMetadata(
            depth=self.depth,
            total_depth=self.total_depth,
            model=self.model,
            conversation_id=self.conversation_id,
            request_id=self.request_id,
        )

    def at_depth(self, depth: int) -> "ChainContext":
        return replace(self, depth=depth)


class EventSink:
    """Builds chain events and hands them to the observer."""

    def __init__(self, context: ChainContext, observer: ChainObserver | None = None):
        self.context = context
        self.observer = observer

    def with_context(self, context: ChainContext) -> "EventSink":
        return EventSink(context, self.observer)

    def emit(self, event_cls: type, **payload: Any) -> ChainEvent:
        """
        Emit one event.

        Args:
            event_cls: One of the event models from ``schemas.events``
            **payload: The event-specific fields

        Returns:
            The emitted event
        """
        event = event_cls(metadata=self.context.metadata(), **payload)
        logger.debug(
            "chain event %s %s",
            event.type.value,
            payload,
            extra={"event_type": event.type.value, "model": self.context.model},
        )
        if self.observer is not None:
            try:
                self.observer(event)
            except Exception:
                logger.exception("Chain observer failed on %s event", event.type.value)
        return event
