"""Base models shared across services."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class Event:
    """Standard event envelope for publishing record changes."""

    event_id: str
    event_type: str  # entity.action (e.g., transaction.created)
    event_time: datetime
    source: str  # Service that generated
    subject: str  # Record ID affected
    data: dict
    metadata: dict = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        event_type: str,
        source: str,
        subject: str,
        data: dict[str, Any],
        **metadata: Any,
    ) -> "Event":
        """Build an event stamped with a fresh id and the current UTC time."""
        return cls(
            event_id=str(uuid.uuid4()),
            event_type=event_type,
            event_time=datetime.now(timezone.utc),
            source=source,
            subject=subject,
            data=data,
            metadata=dict(metadata),
        )
