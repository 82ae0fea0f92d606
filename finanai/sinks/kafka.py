"""Kafka sink publishing transaction events."""

import json
import logging
from dataclasses import dataclass
from typing import Any

from confluent_kafka import KafkaException, Producer

from finanai.config import KafkaConfig
from finanai.exceptions import SinkError
from finanai.models.base import Event
from finanai.sinks.base import EventSink
from finanai.sinks.serialization import to_dict

logger = logging.getLogger(__name__)


@dataclass
class ProducerStats:
    """Track producer delivery statistics."""

    sent: int = 0
    delivered: int = 0
    failed: int = 0

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        total = self.delivered + self.failed
        return self.delivered / total if total > 0 else 0.0


class KafkaSink(EventSink):
    """Publish events to one topic per event type.

    ``transaction.created`` goes to ``<prefix>.transaction.created``, keyed
    by company so a tenant's events stay ordered within a partition.
    """

    def __init__(self, config: KafkaConfig | str) -> None:
        """Initialize Kafka sink.

        Parameters
        ----------
        config : KafkaConfig | str
            Producer configuration or bootstrap servers string.
        """
        if isinstance(config, str):
            config = KafkaConfig(bootstrap_servers=config)

        self.config = config
        try:
            self.producer = Producer(config.to_dict())
        except KafkaException as e:
            raise SinkError(f"Could not create Kafka producer: {e}") from e
        self.stats = ProducerStats()

    def topic_for(self, event: Event) -> str:
        """Topic name for an event."""
        return f"{self.config.topic_prefix}.{event.event_type}"

    def publish(self, event: Event) -> None:
        """Send one event (delivery is reported asynchronously)."""
        key = event.metadata.get("company_id") or event.subject
        value = json.dumps(to_dict(event), ensure_ascii=False, default=str).encode("utf-8")

        try:
            self.producer.produce(
                topic=self.topic_for(event),
                key=key.encode("utf-8") if key else None,
                value=value,
                callback=self._delivery_callback,
            )
        except BufferError as e:
            raise SinkError(f"Producer queue full: {e}") from e
        self.stats.sent += 1
        self.producer.poll(0)

    def _delivery_callback(self, err: Any, msg: Any) -> None:
        """Handle delivery reports."""
        if err:
            self.stats.failed += 1
            logger.error("Delivery failed: %s", err)
        else:
            self.stats.delivered += 1
            logger.debug("Delivered to %s[%d]@%d", msg.topic(), msg.partition(), msg.offset())

    def flush(self, timeout: float = 30.0) -> None:
        """Flush pending messages."""
        self.producer.flush(timeout)

    def close(self) -> None:
        """Flush and close the producer."""
        self.flush()
        logger.info(
            "Kafka sink closed: sent=%d, delivered=%d, failed=%d",
            self.stats.sent,
            self.stats.delivered,
            self.stats.failed,
        )
