"""
Pydantic schemas for the site API.

Length and emptiness checks live in the services so the API and the reader
report the same messages; the schemas only pin down shapes.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from shared.types import PostStatus


class SignInRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: str
    email: Optional[str] = None


class SignInResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    user: UserResponse


class CurrentUserResponse(BaseModel):
    user: Optional[UserResponse] = None


class StatusResponse(BaseModel):
    status: Literal["ok"]


class UploadUrlRequest(BaseModel):
    file_name: str
    file_size: int = Field(..., ge=0)
    content_type: str


class UploadUrlResponse(BaseModel):
    signed_url: str
    path: str
    public_url: Optional[str] = None


class SaveMetadataRequest(BaseModel):
    file_path: str
    title: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    page_count: Optional[int] = None


class UpdatePdfRequest(BaseModel):
    title: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None


class ProgressRequest(BaseModel):
    current_page: int
    total_pages: int


class CreateNoteRequest(BaseModel):
    page_number: int
    content: str


class UpdateNoteRequest(BaseModel):
    content: str


class CreatePostRequest(BaseModel):
    title: str
    content: str = ""
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    publish: bool = False
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None


class UpdatePostRequest(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    status: Optional[PostStatus] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None


class ViewCountResponse(BaseModel):
    id: int
    view_count: int


class CreateQuickRefRequest(BaseModel):
    name: str
    content: Optional[str] = None
    link: Optional[str] = None
    tag: Optional[str] = None


class UpdateQuickRefRequest(BaseModel):
    name: Optional[str] = None
    content: Optional[str] = None
    link: Optional[str] = None
    tag: Optional[str] = None
