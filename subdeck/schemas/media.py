"""Pydantic schemas for object storage and media migrations."""
from typing import Literal

from pydantic import BaseModel, Field


class StorageObjectResponse(BaseModel):
    key: str
    size: int = 0
    modified: str | None = None


class StorageListResponse(BaseModel):
    objects: list[StorageObjectResponse]
    cursor: str | None = None
    truncated: bool = False


class AudioPathUpdate(BaseModel):
    slug: str = Field(..., min_length=1)
    episode_folder: str = Field(..., min_length=1, alias="episodeFolder")
    field: Literal["preview_audio_key"]
    new_path: str = Field(..., min_length=1, alias="newPath")

    model_config = {"populate_by_name": True}


class MigrationOptionsIn(BaseModel):
    prefix: str = "items/"
    source_suffix: str = Field(".mp3", min_length=1)
    target_suffix: str = Field(".opus", min_length=1)
    bitrate_kbps: int = Field(64, ge=8, le=512)
    concurrency: int = Field(20, ge=1, le=50)
    dry_run: bool = True
    delete_original: bool = False
    update_database: bool = True
    max_objects: int = Field(10_000, ge=1)


class MigrationLogEntryOut(BaseModel):
    timestamp: int
    level: str
    message: str
    details: str | None = None


class MigrationJobResponse(BaseModel):
    id: str
    status: str
    options: MigrationOptionsIn
    total: int = 0
    processed: int = 0
    converted: int = 0
    failed: int = 0
    skipped: int = 0
    log: list[MigrationLogEntryOut] = Field(default_factory=list)
    error: str | None = None
    created_at: int
    updated_at: int

    model_config = {"from_attributes": True}
