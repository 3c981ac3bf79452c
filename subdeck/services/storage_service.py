"""Object storage for media files.

Keys are slash-separated paths such as ``items/{slug}/episodes/{folder}/cards/12_audio.mp3``.
Local disk is the default backend; an S3-compatible bucket is used when
STORAGE_BACKEND=s3. Listing is cursor based: a page returns at most ``limit``
objects and a cursor to resume from, or None once exhausted.
"""
import bisect
import logging
import mimetypes
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

import boto3
from botocore.exceptions import ClientError

from subdeck.core.config import settings

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 1000


@dataclass
class StorageObject:
    key: str
    size: int = 0
    modified: str | None = None


@dataclass
class StoragePage:
    objects: list[StorageObject] = field(default_factory=list)
    cursor: str | None = None


class StorageBackend(Protocol):
    """Protocol for storage backends. LocalStorage for disk, S3Storage for buckets."""

    def list_page(self, prefix: str, cursor: str | None = None, limit: int = MAX_PAGE_SIZE) -> StoragePage:
        ...

    def get(self, key: str) -> bytes:
        """Return object bytes. Raises FileNotFoundError if missing."""
        ...

    def put(self, key: str, data: bytes, content_type: str | None = None) -> None:
        ...

    def delete(self, key: str) -> bool:
        """Delete object by key. Returns True if deleted."""
        ...

    def exists(self, key: str) -> bool:
        ...

    def url(self, key: str) -> str:
        """Public URL of an object."""
        ...


def normalize_prefix(prefix: str) -> str:
    norm = prefix.strip().strip("/")
    return f"{norm}/" if norm else ""


class LocalStorage:
    """Store files on local disk under MEDIA_ROOT, one file per key."""

    def __init__(self, base_dir: str | Path | None = None, base_url: str | None = None):
        self.base_dir = Path(base_dir or settings.MEDIA_ROOT).resolve()
        self.base_url = (settings.MEDIA_BASE_URL if base_url is None else base_url).rstrip("/")
        # (prefix, sorted keys) of the last walk; dropped on every write
        self._listing: tuple[str, list[str]] | None = None

    def _path(self, key: str) -> Path:
        path = (self.base_dir / key.lstrip("/")).resolve()
        if self.base_dir not in path.parents:
            raise ValueError(f"Invalid key: {key}")
        return path

    def _keys(self, prefix: str) -> list[str]:
        if not self.base_dir.exists():
            return []
        keys = (p.relative_to(self.base_dir).as_posix() for p in self.base_dir.rglob("*") if p.is_file())
        return sorted(k for k in keys if k.startswith(prefix))

    def list_page(self, prefix: str, cursor: str | None = None, limit: int = MAX_PAGE_SIZE) -> StoragePage:
        """Walk the tree on the first page only; follow-up pages reuse the sorted listing."""
        prefix = normalize_prefix(prefix)
        if cursor is None or self._listing is None or self._listing[0] != prefix:
            self._listing = (prefix, self._keys(prefix))
        keys = self._listing[1]
        if cursor:
            keys = keys[bisect.bisect_right(keys, cursor):]
        page = keys[:limit]
        objects = []
        for key in page:
            stat = self._path(key).stat()
            modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc).isoformat()
            objects.append(StorageObject(key=key, size=stat.st_size, modified=modified))
        next_cursor = page[-1] if len(keys) > limit else None
        return StoragePage(objects=objects, cursor=next_cursor)

    def get(self, key: str) -> bytes:
        return self._path(key).read_bytes()

    def put(self, key: str, data: bytes, content_type: str | None = None) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        self._listing = None

    def delete(self, key: str) -> bool:
        path = self._path(key)
        if path.is_file():
            path.unlink()
            self._listing = None
            return True
        return False

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def url(self, key: str) -> str:
        return f"{self.base_url}/{key}" if self.base_url else f"/media/{key}"


class S3Storage:
    """S3-compatible bucket (Cloudflare R2, MinIO, AWS)."""

    def __init__(self, bucket: str | None = None, client=None):
        self.bucket = bucket or settings.S3_BUCKET_MEDIA
        self.client = client or boto3.client(
            "s3",
            endpoint_url=settings.S3_ENDPOINT_URL,
            aws_access_key_id=settings.S3_ACCESS_KEY,
            aws_secret_access_key=settings.S3_SECRET_KEY,
            region_name=settings.S3_REGION,
        )
        self.base_url = settings.MEDIA_BASE_URL.rstrip("/")

    def list_page(self, prefix: str, cursor: str | None = None, limit: int = MAX_PAGE_SIZE) -> StoragePage:
        params = {"Bucket": self.bucket, "Prefix": normalize_prefix(prefix), "MaxKeys": limit}
        if cursor:
            params["ContinuationToken"] = cursor
        res = self.client.list_objects_v2(**params)
        objects = [
            StorageObject(
                key=obj["Key"],
                size=obj.get("Size", 0),
                modified=obj["LastModified"].isoformat() if obj.get("LastModified") else None,
            )
            for obj in res.get("Contents", [])
        ]
        next_cursor = res.get("NextContinuationToken") if res.get("IsTruncated") else None
        return StoragePage(objects=objects, cursor=next_cursor)

    def get(self, key: str) -> bytes:
        try:
            res = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                raise FileNotFoundError(key) from e
            raise
        return res["Body"].read()

    def put(self, key: str, data: bytes, content_type: str | None = None) -> None:
        content_type = content_type or mimetypes.guess_type(key)[0] or "application/octet-stream"
        self.client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)

    def delete(self, key: str) -> bool:
        self.client.delete_object(Bucket=self.bucket, Key=key)
        return True

    def exists(self, key: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404", "NotFound"):
                return False
            raise
        return True

    def url(self, key: str) -> str:
        return f"{self.base_url}/{key}" if self.base_url else f"/media/{key}"


# Singleton - chosen by STORAGE_BACKEND
_storage: StorageBackend | None = None


def get_storage() -> StorageBackend:
    global _storage
    if _storage is None:
        if settings.STORAGE_BACKEND == "s3":
            _storage = S3Storage()
        else:
            _storage = LocalStorage()
        logger.info("Storage backend: %s", type(_storage).__name__)
    return _storage


def set_storage(storage: StorageBackend | None) -> None:
    """Swap the process-wide backend (tests, scripts)."""
    global _storage
    _storage = storage
