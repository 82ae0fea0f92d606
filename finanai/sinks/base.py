"""Event sink contract."""

import logging
from abc import ABC, abstractmethod

from finanai.models.base import Event

logger = logging.getLogger(__name__)


class EventSink(ABC):
    """Destination for record-change events."""

    @abstractmethod
    def publish(self, event: Event) -> None:
        """Publish one event."""

    def close(self) -> None:
        """Flush and release resources."""


def emit(sink: EventSink | None, event: Event) -> None:
    """Publish ``event`` if a sink is configured; failures are only logged."""
    if sink is None:
        return
    try:
        sink.publish(event)
    except Exception:
        logger.exception("Failed to publish %s for %s", event.event_type, event.subject)
