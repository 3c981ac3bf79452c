"""Admin back office: media path rewrites and migration jobs."""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from subdeck.api.deps import get_current_admin, get_db
from subdeck.core.timeutil import now_ms
from subdeck.schemas.media import AudioPathUpdate, MigrationJobResponse, MigrationOptionsIn
from subdeck.services.media_paths import InvalidEpisodeFolder, MediaTargetNotFound, update_preview_audio_path
from subdeck.services.migration_jobs import create_job, get_job, request_cancel
from subdeck.workers.media_migration import run_media_migration

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(get_current_admin)])


@router.post("/update-audio-path")
async def update_audio_path(
    data: AudioPathUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Point an episode's preview audio at a new storage key."""
    try:
        episode = await update_preview_audio_path(db, data.slug, data.episode_folder, data.new_path)
    except InvalidEpisodeFolder as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except MediaTargetNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    await db.commit()
    return {"success": True, "updated": {"episode_id": episode.id, data.field: data.new_path}}


@router.post("/media-migrations", response_model=MigrationJobResponse, status_code=status.HTTP_201_CREATED)
async def start_media_migration(
    options: MigrationOptionsIn,
    db: AsyncSession = Depends(get_db),
):
    job = await create_job(db, options)
    await db.commit()
    try:
        run_media_migration.delay(job.id)
    except Exception as e:
        logger.warning("Failed to enqueue media migration %s: %s", job.id, e)
        job.status = "failed"
        job.error = f"Failed to enqueue: {e}"
        job.updated_at = now_ms()
        await db.commit()
    return job


async def _job_or_404(db: AsyncSession, job_id: str):
    job = await get_job(db, job_id)
    if not job:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Migration job not found")
    return job


@router.get("/media-migrations/{job_id}", response_model=MigrationJobResponse)
async def get_media_migration(job_id: str, db: AsyncSession = Depends(get_db)):
    return await _job_or_404(db, job_id)


@router.post("/media-migrations/{job_id}/cancel", response_model=MigrationJobResponse)
async def cancel_media_migration(job_id: str, db: AsyncSession = Depends(get_db)):
    """Stop the job at its next batch boundary. Finished jobs are returned unchanged."""
    job = await request_cancel(db, await _job_or_404(db, job_id))
    await db.commit()
    return job
