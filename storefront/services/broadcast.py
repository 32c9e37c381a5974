# storefront/services/broadcast.py
import json
from abc import ABC, abstractmethod

import redis
from fastapi.encoders import jsonable_encoder

from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL, BROADCAST_CHANNEL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def encode_event(event: str, payload: dict) -> str:
    return json.dumps({"event": event, "payload": jsonable_encoder(payload)})


class Broadcaster(ABC):
    """Live channel to every currently connected listener, nothing is persisted."""

    @abstractmethod
    def publish(self, event: str, payload: dict) -> None:
        ...


class NullBroadcaster(Broadcaster):
    def publish(self, event: str, payload: dict) -> None:
        logger.debug(f"Broadcast disabled, dropping {event}")


class RedisBroadcaster(Broadcaster):
    """
    Publishes events on a redis pub/sub channel.
    /ws/events relays the channel to websocket clients, a listener that is
    not subscribed at publish time misses the event.
    """

    def __init__(self, url: str | None = None, channel: str | None = None):
        self.redis = redis.Redis.from_url(url or REDIS_URL, decode_responses=True)
        self.channel = channel or BROADCAST_CHANNEL

    @redis_retry()
    def publish(self, event: str, payload: dict) -> None:
        receivers = self.redis.publish(self.channel, encode_event(event, payload))
        logger.info(f"Broadcast {event} on {self.channel} to {receivers} listener(s)")
