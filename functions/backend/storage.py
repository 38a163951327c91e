"""
Storage abstraction for S3-compatible object storage and in-memory testing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol
from urllib.parse import quote

import boto3
from botocore.config import Config

from shared.constants import SIGNED_URL_EXPIRES_SECONDS


class StorageClient(Protocol):
    """Defines the operations the API needs from object storage."""

    def presign_get(self, path: str, expires_in: int = SIGNED_URL_EXPIRES_SECONDS) -> str:
        ...

    def presign_put(
        self,
        path: str,
        content_type: str = "application/octet-stream",
        expires_in: int = SIGNED_URL_EXPIRES_SECONDS,
    ) -> str:
        ...

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> None:
        ...

    def remove(self, paths: list[str]) -> None:
        ...

    def public_url(self, path: str) -> str:
        ...


@dataclass
class InMemoryStorageClient:
    """Dict-backed storage for tests and local runs."""

    base_url: str = "https://example.test/storage"
    stored_objects: dict = None
    fail_removals: bool = False

    def __post_init__(self):
        if self.stored_objects is None:
            self.stored_objects = {}

    def presign_get(self, path: str, expires_in: int = SIGNED_URL_EXPIRES_SECONDS) -> str:
        return f"{self.base_url}/{path}?op=get&expires={expires_in}"

    def presign_put(
        self,
        path: str,
        content_type: str = "application/octet-stream",
        expires_in: int = SIGNED_URL_EXPIRES_SECONDS,
    ) -> str:
        return (
            f"{self.base_url}/{path}?op=put&expires={expires_in}"
            f"&content_type={quote(content_type, safe='')}"
        )

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> None:
        self.stored_objects[path] = bytes(data)

    def remove(self, paths: list[str]) -> None:
        if self.fail_removals:
            raise OSError("storage removal failed")
        for path in paths:
            self.stored_objects.pop(path, None)

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/{path}"


@dataclass
class S3StorageClient:
    """
    S3-compatible storage client (the hosted project's storage API speaks S3).
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str
    public_base_url: Optional[str] = None

    def __post_init__(self):
        # Path-style addressing works against self-hosted and hosted S3 gateways.
        config = Config(
            s3={"addressing_style": "path"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            config=config,
        )

    def presign_get(self, path: str, expires_in: int = SIGNED_URL_EXPIRES_SECONDS) -> str:
        return self._client.generate_presigned_url(
            ClientMethod="get_object",
            Params={"Bucket": self.bucket, "Key": path},
            ExpiresIn=expires_in,
        )

    def presign_put(
        self,
        path: str,
        content_type: str = "application/octet-stream",
        expires_in: int = SIGNED_URL_EXPIRES_SECONDS,
    ) -> str:
        return self._client.generate_presigned_url(
            ClientMethod="put_object",
            Params={"Bucket": self.bucket, "Key": path, "ContentType": content_type},
            ExpiresIn=expires_in,
        )

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> None:
        self._client.put_object(
            Bucket=self.bucket,
            Key=path,
            Body=data,
            ContentType=content_type,
        )

    def remove(self, paths: list[str]) -> None:
        if not paths:
            return
        self._client.delete_objects(
            Bucket=self.bucket,
            Delete={"Objects": [{"Key": path} for path in paths], "Quiet": True},
        )

    def public_url(self, path: str) -> str:
        base = self.public_base_url or f"{(self.endpoint or '').rstrip('/')}/{self.bucket}"
        return f"{base.rstrip('/')}/{path}"
