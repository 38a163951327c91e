"""
Application context: the clients one running app talks to.

Built once per app (in the FastAPI lifespan, or handed to ``create_app`` by
tests) and closed on shutdown. Each client falls back to its in-memory
implementation when its settings are missing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from backend.auth import AuthClient, InMemoryAuthClient, SupabaseAuthClient
from backend.config import Settings
from backend.db import DbClient, InMemoryDbClient, PostgresDbClient
from backend.events import AuthEventBus, InMemoryAuthEventBus, RedisAuthEventBus
from backend.storage import InMemoryStorageClient, S3StorageClient, StorageClient

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    db: DbClient
    storage: StorageClient
    auth: AuthClient
    auth_events: AuthEventBus
    settings: Settings = field(default_factory=Settings)

    @classmethod
    def in_memory(cls, settings: Optional[Settings] = None) -> "AppContext":
        events = InMemoryAuthEventBus()
        return cls(
            db=InMemoryDbClient(),
            storage=InMemoryStorageClient(),
            auth=InMemoryAuthClient(events=events),
            auth_events=events,
            settings=settings or Settings(use_in_memory_backends=True),
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        if settings.use_in_memory_backends:
            return cls.in_memory(settings)

        if settings.redis_url:
            events: AuthEventBus = RedisAuthEventBus(
                url=settings.redis_url, channel=settings.auth_events_channel
            )
        else:
            events = InMemoryAuthEventBus()

        if settings.database_url:
            db: DbClient = PostgresDbClient(settings.database_url)
        else:
            logger.warning("DATABASE_URL not set; using in-memory database")
            db = InMemoryDbClient()

        if settings.storage_bucket:
            storage: StorageClient = S3StorageClient(
                bucket=settings.storage_bucket,
                region=settings.storage_region or "",
                endpoint=settings.storage_endpoint or "",
                access_key_id=settings.storage_access_key_id or "",
                secret_access_key=settings.storage_secret_access_key or "",
                public_base_url=settings.storage_public_base_url,
            )
        else:
            logger.warning("STORAGE_BUCKET not set; using in-memory storage")
            storage = InMemoryStorageClient()

        if settings.supabase_url and settings.supabase_anon_key:
            auth: AuthClient = SupabaseAuthClient(
                url=settings.supabase_url,
                anon_key=settings.supabase_anon_key,
                events=events,
            )
        else:
            logger.warning("SUPABASE_URL not set; using in-memory auth")
            auth = InMemoryAuthClient(events=events)

        return cls(db=db, storage=storage, auth=auth, auth_events=events, settings=settings)

    def close(self) -> None:
        for client in (self.auth, self.auth_events, self.db):
            close = getattr(client, "close", None)
            if close is None:
                continue
            try:
                close()
            except Exception:
                logger.exception("Error closing %s", type(client).__name__)
