"""Rewrite database references after a media object has been renamed."""
import logging
import re
from collections.abc import Awaitable, Callable

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subdeck.core.timeutil import now_ms
from subdeck.models.content import Card, Episode
from subdeck.services.content_service import get_content_item_by_slug, get_episode_by_number

logger = logging.getLogger(__name__)

PREVIEW_AUDIO_RE = re.compile(r"items/([^/]+)/episodes/([^/]+)/preview/")
CARD_AUDIO_RE = re.compile(r"items/([^/]+)/episodes/([^/]+)/cards/(\d+)_")
EPISODE_FOLDER_RE = re.compile(r"e?(\d+)", re.IGNORECASE)

PathUpdater = Callable[[str, str], Awaitable[str]]


class InvalidEpisodeFolder(ValueError):
    pass


class MediaTargetNotFound(LookupError):
    pass


def parse_episode_folder(folder: str) -> int:
    match = EPISODE_FOLDER_RE.search(folder)
    if not match:
        raise InvalidEpisodeFolder(f"Invalid episodeFolder format: {folder}")
    return int(match.group(1))


async def _resolve_episode(db: AsyncSession, slug: str, episode_folder: str) -> Episode:
    episode_number = parse_episode_folder(episode_folder)
    content = await get_content_item_by_slug(db, slug)
    if content is None:
        raise MediaTargetNotFound(f"Content not found: {slug}")
    episode = await get_episode_by_number(db, content.id, episode_number)
    if episode is None:
        raise MediaTargetNotFound(f"Episode not found for {slug}/e{episode_number}")
    return episode


async def update_preview_audio_path(db: AsyncSession, slug: str, episode_folder: str, new_path: str) -> Episode:
    episode = await _resolve_episode(db, slug, episode_folder)
    episode.preview_audio_key = new_path
    episode.updated_at = now_ms()
    await db.flush()
    return episode


async def update_card_audio_path(
    db: AsyncSession,
    slug: str,
    episode_folder: str,
    card_number: int,
    new_path: str,
) -> bool:
    episode = await _resolve_episode(db, slug, episode_folder)
    result = await db.execute(
        update(Card)
        .where(Card.episode_id == episode.id, Card.card_number == card_number)
        .values(audio_key=new_path, updated_at=now_ms())
        .execution_options(synchronize_session=False)
    )
    return bool(result.rowcount)


async def update_media_path(db: AsyncSession, old_key: str, new_key: str) -> str:
    """Point the row referencing `old_key` at `new_key`.

    Returns "preview", "card" or "skipped" depending on which reference the
    key layout identifies.
    """
    if "/preview/" in old_key:
        match = PREVIEW_AUDIO_RE.search(old_key)
        if not match:
            raise InvalidEpisodeFolder(f"Could not extract slug/episode from path: {old_key}")
        slug, folder = match.groups()
        await update_preview_audio_path(db, slug, folder, new_key)
        return "preview"
    if "/cards/" in old_key:
        match = CARD_AUDIO_RE.search(old_key)
        if not match:
            raise InvalidEpisodeFolder(f"Could not extract slug/episode/card from path: {old_key}")
        slug, folder, card_number = match.groups()
        if not await update_card_audio_path(db, slug, folder, int(card_number), new_key):
            raise MediaTargetNotFound(f"Card {card_number} not found for {slug}/{folder}")
        return "card"
    return "skipped"


def make_path_updater(session_maker: async_sessionmaker) -> PathUpdater:
    """Path updater that commits each rewrite in its own session."""

    async def updater(old_key: str, new_key: str) -> str:
        async with session_maker() as db:
            outcome = await update_media_path(db, old_key, new_key)
            await db.commit()
        return outcome

    return updater
