"""
Dependency wiring for the FastAPI app.

Clients come from the ``AppContext`` attached to the running app, so two apps
in one process (e.g. in tests) never share state.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request

from backend.auth import AuthClient
from backend.context import AppContext
from backend.db import DbClient
from backend.events import AuthEventBus
from backend.library import LibraryService
from backend.notes import NotesService
from backend.posts import PostsService
from backend.quickref import QuickRefService
from backend.storage import StorageClient
from shared.errors import NotAuthenticatedError
from shared.types import AuthUser


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_db_client(context: AppContext = Depends(get_context)) -> DbClient:
    return context.db


def get_storage_client(context: AppContext = Depends(get_context)) -> StorageClient:
    return context.storage


def get_auth_client(context: AppContext = Depends(get_context)) -> AuthClient:
    return context.auth


def get_auth_events(context: AppContext = Depends(get_context)) -> AuthEventBus:
    return context.auth_events


def get_access_token(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_optional_user(
    token: Optional[str] = Depends(get_access_token),
    auth: AuthClient = Depends(get_auth_client),
) -> Optional[AuthUser]:
    return auth.get_current_user(token)


def require_user(user: Optional[AuthUser] = Depends(get_optional_user)) -> AuthUser:
    if user is None:
        raise NotAuthenticatedError()
    return user


def get_notes_service(db: DbClient = Depends(get_db_client)) -> NotesService:
    return NotesService(db)


def get_library_service(context: AppContext = Depends(get_context)) -> LibraryService:
    return LibraryService(
        context.db,
        context.storage,
        signed_url_expires_seconds=context.settings.signed_url_expires_seconds,
    )


def get_posts_service(context: AppContext = Depends(get_context)) -> PostsService:
    return PostsService(context.db, context.storage)


def get_quickref_service(db: DbClient = Depends(get_db_client)) -> QuickRefService:
    return QuickRefService(db)
