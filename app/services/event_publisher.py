"""
Kafka event publisher — fire-and-forget.

Publishes portfolio events for downstream consumers
(dashboards, collections tooling, data warehouse sync).
Gracefully degrades if Kafka is unavailable.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone

import structlog
from app.core.config import get_settings

logger = structlog.get_logger()

_producer = None


async def _get_producer():
    global _producer
    settings = get_settings()
    if not settings.kafka_enabled:
        return None
    if _producer is None:
        from aiokafka import AIOKafkaProducer
        _producer = AIOKafkaProducer(bootstrap_servers=settings.kafka_bootstrap)
        await _producer.start()
    return _producer


async def _publish(event_type: str, key: str, payload: dict) -> None:
    settings = get_settings()
    if not settings.kafka_enabled:
        return

    try:
        producer = await _get_producer()
        if producer:
            event = {
                "event_type": event_type,
                "published_at": datetime.now(timezone.utc).isoformat(),
                **payload,
            }
            await producer.send_and_wait(
                settings.kafka_topic_portfolio_events,
                json.dumps(event).encode("utf-8"),
                key=key.encode("utf-8"),
            )
            logger.info("kafka_event_published", event_type=event_type, key=key)
    except Exception as e:
        # Fire-and-forget: log but don't fail the request
        logger.warning("kafka_publish_failed", event_type=event_type, error=str(e))


async def publish_upload_completed(upload_id: str, owner_id: str, inserted: int, skipped: int) -> None:
    await _publish(
        "PORTFOLIO_UPLOAD_COMPLETED",
        upload_id,
        {"upload_id": upload_id, "owner_id": owner_id, "inserted_count": inserted, "skipped_count": skipped},
    )


async def publish_analysis_completed(analysis_id: str, customer_id: str, confidence_score: int) -> None:
    await _publish(
        "CUSTOMER_ANALYSIS_COMPLETED",
        customer_id,
        {"analysis_id": analysis_id, "customer_id": customer_id, "confidence_score": confidence_score},
    )


async def close_producer() -> None:
    global _producer
    if _producer is not None:
        await _producer.stop()
        _producer = None
