"""
Auth-state event bus.

Sessions subscribe to sign-in/sign-out events instead of polling the auth
service. Supports an in-memory fallback for tests/local runs and a
Redis pub/sub implementation for production.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

import redis
from redis import exceptions as redis_exceptions

from shared.types import AuthEvent

logger = logging.getLogger(__name__)

AuthListener = Callable[[AuthEvent], None]


class AuthEventBus(Protocol):
    """Minimal pub/sub interface for auth-state changes."""

    def publish(self, event: AuthEvent) -> None:
        ...

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        ...

    def close(self) -> None:
        ...


@dataclass
class InMemoryAuthEventBus:
    """Delivers events synchronously to every listener in this process."""

    listeners: list[AuthListener] = field(default_factory=list)
    published: list[AuthEvent] = field(default_factory=list)

    def __post_init__(self):
        self._lock = threading.Lock()

    def publish(self, event: AuthEvent) -> None:
        with self._lock:
            self.published.append(event)
            listeners = list(self.listeners)
        _deliver(listeners, event)

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        with self._lock:
            self.listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self.listeners:
                    self.listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        with self._lock:
            self.listeners.clear()


def _deliver(listeners: list[AuthListener], event: AuthEvent) -> None:
    for listener in listeners:
        try:
            listener(event)
        except Exception:
            logger.exception("Auth listener failed for %s", event.kind)


@dataclass
class RedisAuthEventBus:
    """Redis-backed bus using PUBLISH/SUBSCRIBE on a single channel."""

    url: str
    channel: str = "site:auth-events"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)
        self._listeners: list[AuthListener] = []
        self._lock = threading.Lock()
        self._pubsub = None
        self._thread: Optional[threading.Thread] = None

    def publish(self, event: AuthEvent) -> None:
        try:
            self.client.publish(self.channel, json.dumps(event.as_dict()))
        except redis_exceptions.ConnectionError:
            # Connection resets can happen on managed Redis; reconnect once.
            logger.warning("Redis connection lost; reconnecting to publish %s", event.kind)
            self.client = redis.Redis.from_url(self.url)
            self.client.publish(self.channel, json.dumps(event.as_dict()))

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)
            if self._thread is None:
                self._pubsub = self.client.pubsub(ignore_subscribe_messages=True)
                self._pubsub.subscribe(**{self.channel: self._on_message})
                self._thread = self._pubsub.run_in_thread(
                    sleep_time=0.1, daemon=True
                )

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _on_message(self, message: dict) -> None:
        try:
            event = AuthEvent.from_dict(json.loads(message["data"]))
        except (ValueError, KeyError) as exc:
            logger.warning("Ignoring malformed auth event: %s", exc)
            return
        with self._lock:
            listeners = list(self._listeners)
        _deliver(listeners, event)

    def close(self) -> None:
        with self._lock:
            self._listeners.clear()
            if self._thread is not None:
                self._thread.stop()
                self._thread = None
            if self._pubsub is not None:
                self._pubsub.close()
                self._pubsub = None
        self.client.close()
