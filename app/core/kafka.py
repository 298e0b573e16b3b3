"""
Kafka producer for domain events.

Events are an audit trail, not part of any operation's contract: publishing
never raises into the caller and is a no-op when Kafka is disabled.
"""

import json
from typing import Optional

from aiokafka import AIOKafkaProducer
from aiokafka.errors import KafkaError
from pydantic import BaseModel

from app.core.config import settings
from app.core.events import EventEnvelope, EventType, create_event
from app.core.logging import get_logger
from app.core.topics import KafkaTopics

logger = get_logger(__name__)


class KafkaProducer:
    _producer: Optional[AIOKafkaProducer] = None
    _started: bool = False

    @classmethod
    async def start(cls) -> None:
        if not settings.KAFKA_ENABLED:
            logger.info("Kafka disabled, events will not be published")
            return
        if cls._started:
            return
        cls._producer = AIOKafkaProducer(
            bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
            value_serializer=lambda v: json.dumps(v).encode("utf-8"),
            key_serializer=lambda k: k.encode("utf-8") if k else None,
        )
        try:
            await cls._producer.start()
            cls._started = True
        except KafkaError as e:
            logger.warning(f"Failed to start Kafka producer: {e}")
            cls._producer = None

    @classmethod
    async def stop(cls) -> None:
        if cls._producer is not None and cls._started:
            await cls._producer.stop()
        cls._producer = None
        cls._started = False

    @classmethod
    def is_started(cls) -> bool:
        return cls._started


async def publish_event(topic: str, event: EventEnvelope, key: Optional[str] = None) -> bool:
    """Send an event; returns False instead of raising when it cannot be sent."""
    if not KafkaProducer._started or KafkaProducer._producer is None:
        logger.debug(f"Kafka producer not running, dropping {event.event_type.value}")
        return False
    try:
        await KafkaProducer._producer.send_and_wait(
            topic, event.model_dump(mode="json"), key=key
        )
        logger.info(f"Published {event.event_type.value} to {topic}")
        return True
    except Exception as e:
        logger.warning(f"Failed to publish {event.event_type.value} to {topic}: {e}")
        return False


async def publish_domain_event(
    event_type: EventType,
    data: BaseModel,
    actor_user_id: Optional[str] = None,
    actor_role: Optional[str] = None,
    key: Optional[str] = None,
) -> bool:
    """Wrap data in an envelope and publish it to the topic for its type."""
    event = create_event(
        event_type, data, actor_user_id=actor_user_id, actor_role=actor_role
    )
    return await publish_event(KafkaTopics.for_event(event_type), event, key=key)
