"""Server-side media migration job, polled by the admin UI."""
from sqlalchemy import JSON, BigInteger, Column, Integer, String, Text

from subdeck.core.timeutil import now_ms
from subdeck.db.session import Base, new_id

JOB_STATUSES = ("queued", "running", "cancelling", "cancelled", "completed", "failed")


class MediaMigrationJob(Base):
    __tablename__ = "media_migration_jobs"

    id = Column(String(64), primary_key=True, default=new_id)
    status = Column(String(20), nullable=False, default="queued", index=True)
    options = Column(JSON, nullable=False, default=dict)
    total = Column(Integer, nullable=False, default=0)
    processed = Column(Integer, nullable=False, default=0)
    converted = Column(Integer, nullable=False, default=0)
    failed = Column(Integer, nullable=False, default=0)
    skipped = Column(Integer, nullable=False, default=0)
    log = Column(JSON, nullable=False, default=list)  # newest first, capped
    error = Column(Text, nullable=True)
    created_at = Column(BigInteger, default=now_ms)
    updated_at = Column(BigInteger, default=now_ms, onupdate=now_ms)
