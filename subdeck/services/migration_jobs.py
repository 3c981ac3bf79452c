"""Server-side media migration jobs: persisted options, progress and log."""
import logging
from dataclasses import asdict, fields

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subdeck.core.timeutil import now_ms
from subdeck.db.session import async_session_maker
from subdeck.models.migration import MediaMigrationJob
from subdeck.schemas.media import MigrationOptionsIn
from subdeck.services.media_migration import Converter, MediaMigrator, MigrationLog, MigrationOptions, MigrationStats
from subdeck.services.media_paths import make_path_updater
from subdeck.services.storage_service import StorageBackend, get_storage

logger = logging.getLogger(__name__)

# Log entries kept on the job row for status polling
JOB_LOG_LIMIT = 200
ACTIVE_STATUSES = ("queued", "running")


async def create_job(db: AsyncSession, options: MigrationOptionsIn) -> MediaMigrationJob:
    job = MediaMigrationJob(status="queued", options=options.model_dump(), log=[])
    db.add(job)
    await db.flush()
    await db.refresh(job)
    return job


async def get_job(db: AsyncSession, job_id: str) -> MediaMigrationJob | None:
    return await db.get(MediaMigrationJob, job_id)


async def request_cancel(db: AsyncSession, job: MediaMigrationJob) -> MediaMigrationJob:
    """Ask a queued or running job to stop at its next batch boundary."""
    if job.status in ACTIVE_STATUSES:
        job.status = "cancelling"
        job.updated_at = now_ms()
        await db.flush()
    return job


def _options_from_json(raw: dict) -> MigrationOptions:
    known = {f.name for f in fields(MigrationOptions)}
    return MigrationOptions(**{k: v for k, v in (raw or {}).items() if k in known})


async def _save_progress(
    session_maker: async_sessionmaker,
    job_id: str,
    stats: MigrationStats,
    log: MigrationLog,
    *,
    status: str | None = None,
    error: str | None = None,
) -> None:
    values = {
        "total": stats.total,
        "processed": stats.processed,
        "converted": stats.converted,
        "failed": stats.failed,
        "skipped": stats.skipped,
        "log": [asdict(entry) for entry in log.entries(JOB_LOG_LIMIT)],
        "updated_at": now_ms(),
    }
    if status is not None:
        values["status"] = status
    if error is not None:
        values["error"] = error
    async with session_maker() as db:
        await db.execute(update(MediaMigrationJob).where(MediaMigrationJob.id == job_id).values(**values))
        await db.commit()


async def execute_job(
    job_id: str,
    *,
    session_maker: async_sessionmaker = async_session_maker,
    storage: StorageBackend | None = None,
    converter: Converter | None = None,
) -> MigrationStats | None:
    """Run a queued job to completion. Returns None if the job was not runnable."""
    async with session_maker() as db:
        job = await db.get(MediaMigrationJob, job_id)
        if job is None:
            logger.warning("Media migration job %s not found", job_id)
            return None
        if job.status == "cancelling":
            job.status = "cancelled"
            await db.commit()
            return None
        if job.status != "queued":
            logger.warning("Media migration job %s is %s, not starting", job_id, job.status)
            return None
        job.status = "running"
        job.updated_at = now_ms()
        options = _options_from_json(job.options)
        await db.commit()

    async def should_stop() -> bool:
        async with session_maker() as db:
            status = await db.scalar(select(MediaMigrationJob.status).where(MediaMigrationJob.id == job_id))
        return status == "cancelling"

    async def on_batch(stats: MigrationStats) -> None:
        await _save_progress(session_maker, job_id, stats, migrator.log)

    migrator = MediaMigrator(
        storage or get_storage(),
        options,
        converter=converter,
        path_updater=make_path_updater(session_maker),
        should_stop=should_stop,
        on_batch=on_batch,
    )
    logger.info("Media migration job %s started", job_id)
    try:
        objects = await migrator.scan()
        if migrator.stats.total:
            await _save_progress(session_maker, job_id, migrator.stats, migrator.log)
        stats = await migrator.run([obj.key for obj in objects])
    except Exception as e:
        logger.exception("Media migration job %s failed", job_id)
        await _save_progress(session_maker, job_id, migrator.stats, migrator.log, status="failed", error=str(e))
        raise

    final_status = "cancelled" if stats.cancelled else "completed"
    await _save_progress(session_maker, job_id, stats, migrator.log, status=final_status)
    logger.info("Media migration job %s %s: %s", job_id, final_status, stats)
    return stats
