"""Celery task running server-side media migration jobs."""
import asyncio
from dataclasses import asdict

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from subdeck.core.celery_app import celery_app
from subdeck.core.config import settings
from subdeck.services.migration_jobs import execute_job


async def _run(job_id: str) -> dict | None:
    # Fresh engine per task: pooled connections cannot outlive asyncio.run's loop
    engine = create_async_engine(settings.DATABASE_URL, poolclass=NullPool)
    try:
        session_maker = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
        stats = await execute_job(job_id, session_maker=session_maker)
    finally:
        await engine.dispose()
    return asdict(stats) if stats else None


@celery_app.task(name="subdeck.run_media_migration")
def run_media_migration(job_id: str) -> dict | None:
    """Scan, convert and rewrite media for one job row; progress is written to the row."""
    return asyncio.run(_run(job_id))
