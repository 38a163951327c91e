"""
HTTP routes for the site API.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from backend.auth import AuthClient
from backend.dependencies import (
    get_access_token,
    get_auth_client,
    get_library_service,
    get_notes_service,
    get_optional_user,
    get_posts_service,
    get_quickref_service,
    require_user,
)
from backend.library import LibraryService
from backend.notes import NotesService
from backend.posts import PostsService
from backend.quickref import QuickRefService
from backend.schemas import (
    CreateNoteRequest,
    CreatePostRequest,
    CreateQuickRefRequest,
    CurrentUserResponse,
    ProgressRequest,
    SaveMetadataRequest,
    SignInRequest,
    SignInResponse,
    StatusResponse,
    UpdateNoteRequest,
    UpdatePdfRequest,
    UpdatePostRequest,
    UpdateQuickRefRequest,
    UploadUrlRequest,
    UploadUrlResponse,
    ViewCountResponse,
)
from shared.types import AuthUser

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=StatusResponse)
def health():
    return {"status": "ok"}


# -- auth ---------------------------------------------------------------------


@router.post("/auth/sign-in", response_model=SignInResponse)
def sign_in(payload: SignInRequest, auth: AuthClient = Depends(get_auth_client)):
    session = auth.sign_in(payload.email, payload.password)
    return {
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "expires_in": session.expires_in,
        "user": {"id": session.user.id, "email": session.user.email},
    }


@router.post("/auth/sign-out", response_model=StatusResponse)
def sign_out(
    _user: AuthUser = Depends(require_user),
    token: Optional[str] = Depends(get_access_token),
    auth: AuthClient = Depends(get_auth_client),
):
    auth.sign_out(token)
    return {"status": "ok"}


@router.get("/auth/user", response_model=CurrentUserResponse)
def current_user(user: Optional[AuthUser] = Depends(get_optional_user)):
    if user is None:
        return {"user": None}
    return {"user": {"id": user.id, "email": user.email}}


# -- posts --------------------------------------------------------------------


@router.get("/posts")
def list_posts(
    include_drafts: bool = Query(default=False),
    limit: int = Query(default=100, ge=1, le=500),
    user: Optional[AuthUser] = Depends(get_optional_user),
    posts: PostsService = Depends(get_posts_service),
):
    if include_drafts:
        items = posts.list_all(user, limit=limit)
    else:
        items = posts.list_published(limit=limit)
    return {"posts": [post.as_dict() for post in items]}


@router.get("/posts/{slug}")
def get_post(
    slug: str,
    user: Optional[AuthUser] = Depends(get_optional_user),
    posts: PostsService = Depends(get_posts_service),
):
    return posts.get_by_slug(slug, user).as_dict()


@router.post("/posts", status_code=201)
def create_post(
    payload: CreatePostRequest,
    user: Optional[AuthUser] = Depends(get_optional_user),
    posts: PostsService = Depends(get_posts_service),
):
    post = posts.create_post(
        user,
        title=payload.title,
        content=payload.content,
        slug=payload.slug,
        excerpt=payload.excerpt,
        publish=payload.publish,
        meta_title=payload.meta_title,
        meta_description=payload.meta_description,
    )
    return post.as_dict()


@router.patch("/posts/{post_id}")
def update_post(
    post_id: int,
    payload: UpdatePostRequest,
    user: Optional[AuthUser] = Depends(get_optional_user),
    posts: PostsService = Depends(get_posts_service),
):
    return posts.update_post(user, post_id, payload.model_dump(exclude_unset=True)).as_dict()


@router.delete("/posts/{post_id}", response_model=StatusResponse)
def delete_post(
    post_id: int,
    user: Optional[AuthUser] = Depends(get_optional_user),
    posts: PostsService = Depends(get_posts_service),
):
    posts.delete_post(user, post_id)
    return {"status": "ok"}


@router.post("/posts/{post_id}/views", response_model=ViewCountResponse)
def record_post_view(post_id: int, posts: PostsService = Depends(get_posts_service)):
    return {"id": post_id, "view_count": posts.record_view(post_id)}


@router.post("/images/upload-url", response_model=UploadUrlResponse)
def create_image_upload_url(
    payload: UploadUrlRequest,
    user: Optional[AuthUser] = Depends(get_optional_user),
    posts: PostsService = Depends(get_posts_service),
):
    return posts.create_image_upload_url(
        user, payload.file_name, payload.file_size, payload.content_type
    )


# -- library ------------------------------------------------------------------


@router.get("/library")
def list_library(
    user: Optional[AuthUser] = Depends(get_optional_user),
    library: LibraryService = Depends(get_library_service),
):
    return {"pdfs": [item.as_dict() for item in library.list_library(user)]}


@router.post("/library/upload-url", response_model=UploadUrlResponse)
def create_pdf_upload_url(
    payload: UploadUrlRequest,
    user: Optional[AuthUser] = Depends(get_optional_user),
    library: LibraryService = Depends(get_library_service),
):
    return library.create_upload_url(
        user, payload.file_name, payload.file_size, payload.content_type
    )


@router.post("/library", status_code=201)
def save_pdf_metadata(
    payload: SaveMetadataRequest,
    user: Optional[AuthUser] = Depends(get_optional_user),
    library: LibraryService = Depends(get_library_service),
):
    document = library.save_metadata(
        user,
        file_path=payload.file_path,
        title=payload.title,
        description=payload.description,
        thumbnail_url=payload.thumbnail_url,
        page_count=payload.page_count,
    )
    return document.as_dict()


@router.post("/library/upload", status_code=201)
async def upload_pdf(
    file: UploadFile = File(...),
    title: str = Form(...),
    description: Optional[str] = Form(default=None),
    thumbnail_url: Optional[str] = Form(default=None),
    user: Optional[AuthUser] = Depends(get_optional_user),
    library: LibraryService = Depends(get_library_service),
):
    data = await file.read()
    document = library.upload_pdf(
        user,
        file_name=file.filename or "",
        data=data,
        content_type=file.content_type,
        title=title,
        description=description,
        thumbnail_url=thumbnail_url,
    )
    return document.as_dict()


@router.get("/library/{pdf_id}")
def open_pdf(
    pdf_id: str,
    user: Optional[AuthUser] = Depends(get_optional_user),
    library: LibraryService = Depends(get_library_service),
):
    return library.open_document(user, pdf_id).as_dict()


@router.patch("/library/{pdf_id}")
def update_pdf(
    pdf_id: str,
    payload: UpdatePdfRequest,
    user: Optional[AuthUser] = Depends(get_optional_user),
    library: LibraryService = Depends(get_library_service),
):
    return library.update_pdf(
        user,
        pdf_id,
        title=payload.title,
        description=payload.description,
        thumbnail_url=payload.thumbnail_url,
    ).as_dict()


@router.delete("/library/{pdf_id}", response_model=StatusResponse)
def delete_pdf(
    pdf_id: str,
    user: Optional[AuthUser] = Depends(get_optional_user),
    library: LibraryService = Depends(get_library_service),
):
    library.delete_pdf(user, pdf_id)
    return {"status": "ok"}


@router.get("/library/{pdf_id}/progress")
def get_progress(
    pdf_id: str,
    user: Optional[AuthUser] = Depends(get_optional_user),
    library: LibraryService = Depends(get_library_service),
):
    progress = library.get_progress(user, pdf_id)
    return {"progress": progress.as_dict() if progress else None}


@router.put("/library/{pdf_id}/progress")
def record_progress(
    pdf_id: str,
    payload: ProgressRequest,
    user: Optional[AuthUser] = Depends(get_optional_user),
    library: LibraryService = Depends(get_library_service),
):
    session = library.record_progress(
        user, pdf_id, payload.current_page, payload.total_pages
    )
    return {"progress": session.as_dict()}


@router.get("/library/{pdf_id}/notes")
def list_page_notes(
    pdf_id: str,
    page: int = Query(...),
    notes: NotesService = Depends(get_notes_service),
):
    return {"notes": [note.as_dict() for note in notes.notes_for_page(pdf_id, page)]}


@router.post("/library/{pdf_id}/notes", status_code=201)
def create_note(
    pdf_id: str,
    payload: CreateNoteRequest,
    user: Optional[AuthUser] = Depends(get_optional_user),
    notes: NotesService = Depends(get_notes_service),
):
    return notes.create_note(user, pdf_id, payload.page_number, payload.content).as_dict()


# -- notes --------------------------------------------------------------------


@router.get("/notes")
def list_notes(
    pdf_id: Optional[str] = Query(default=None),
    q: Optional[str] = Query(default=None),
    notes: NotesService = Depends(get_notes_service),
):
    return {"notes": [item.as_dict() for item in notes.all_notes(pdf_id, q)]}


@router.get("/notes/documents")
def list_documents_with_notes(notes: NotesService = Depends(get_notes_service)):
    return {"documents": notes.documents_with_notes()}


@router.patch("/notes/{note_id}")
def update_note(
    note_id: str,
    payload: UpdateNoteRequest,
    user: Optional[AuthUser] = Depends(get_optional_user),
    notes: NotesService = Depends(get_notes_service),
):
    return notes.update_note(user, note_id, payload.content).as_dict()


@router.delete("/notes/{note_id}", response_model=StatusResponse)
def delete_note(
    note_id: str,
    user: Optional[AuthUser] = Depends(get_optional_user),
    notes: NotesService = Depends(get_notes_service),
):
    notes.delete_note(user, note_id)
    return {"status": "ok"}


# -- quick refs ---------------------------------------------------------------


@router.get("/quick-refs")
def list_quick_refs(refs: QuickRefService = Depends(get_quickref_service)):
    return {"quick_refs": [ref.as_dict() for ref in refs.list_refs()]}


@router.post("/quick-refs", status_code=201)
def create_quick_ref(
    payload: CreateQuickRefRequest,
    user: Optional[AuthUser] = Depends(get_optional_user),
    refs: QuickRefService = Depends(get_quickref_service),
):
    return refs.create_ref(
        user,
        name=payload.name,
        content=payload.content,
        link=payload.link,
        tag=payload.tag,
    ).as_dict()


@router.patch("/quick-refs/{ref_id}")
def update_quick_ref(
    ref_id: str,
    payload: UpdateQuickRefRequest,
    user: Optional[AuthUser] = Depends(get_optional_user),
    refs: QuickRefService = Depends(get_quickref_service),
):
    return refs.update_ref(user, ref_id, payload.model_dump(exclude_unset=True)).as_dict()


@router.delete("/quick-refs/{ref_id}", response_model=StatusResponse)
def delete_quick_ref(
    ref_id: str,
    user: Optional[AuthUser] = Depends(get_optional_user),
    refs: QuickRefService = Depends(get_quickref_service),
):
    refs.delete_ref(user, ref_id)
    return {"status": "ok"}
