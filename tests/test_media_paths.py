from __future__ import annotations

import pytest
from sqlalchemy import select

from subdeck.db.session import async_session_maker
from subdeck.models import Card, Episode
from subdeck.services.media_paths import (
    InvalidEpisodeFolder,
    MediaTargetNotFound,
    make_path_updater,
    parse_episode_folder,
    update_media_path,
)

FILM_SLUG = "my-film"


@pytest.mark.parametrize("folder,number", [("e12", 12), ("12", 12), ("E3", 3), ("ep_004", 4)])
def test_parse_episode_folder(folder, number):
    assert parse_episode_folder(folder) == number


def test_parse_episode_folder_rejects_garbage():
    with pytest.raises(InvalidEpisodeFolder):
        parse_episode_folder("preview")


async def test_preview_key_updates_episode(catalog, db):
    updater = make_path_updater(async_session_maker)
    old = f"items/{FILM_SLUG}/episodes/e2/preview/preview.mp3"
    new = f"items/{FILM_SLUG}/episodes/e2/preview/preview.opus"

    assert await updater(old, new) == "preview"
    assert db.scalar(select(Episode.preview_audio_key).where(Episode.id == "ep-2")) == new
    assert db.scalar(select(Episode.preview_audio_key).where(Episode.id == "ep-1")).endswith(".mp3")


async def test_card_key_updates_card(catalog, db):
    updater = make_path_updater(async_session_maker)
    new = f"items/{FILM_SLUG}/episodes/e1/cards/3_audio.opus"

    assert await updater(f"items/{FILM_SLUG}/episodes/e1/cards/3_audio.mp3", new) == "card"
    assert db.scalar(select(Card.audio_key).where(Card.id == "card-3")) == new
    assert db.scalar(select(Card.audio_key).where(Card.id == "card-4")).endswith(".mp3")


async def test_other_keys_are_skipped(catalog):
    async with async_session_maker() as session:
        assert await update_media_path(session, f"items/{FILM_SLUG}/full.mp3", f"items/{FILM_SLUG}/full.opus") == "skipped"


async def test_missing_targets_raise(catalog):
    async with async_session_maker() as session:
        with pytest.raises(MediaTargetNotFound):
            await update_media_path(session, "items/nope/episodes/e1/preview/p.mp3", "items/nope/episodes/e1/preview/p.opus")
        with pytest.raises(MediaTargetNotFound):
            await update_media_path(session, f"items/{FILM_SLUG}/episodes/e9/preview/p.mp3", "x.opus")
        with pytest.raises(MediaTargetNotFound):
            await update_media_path(session, f"items/{FILM_SLUG}/episodes/e1/cards/99_a.mp3", "x.opus")


def test_update_audio_path_endpoint(client, catalog, admin_headers, db):
    response = client.post(
        "/admin/update-audio-path",
        json={"slug": FILM_SLUG, "episodeFolder": "e1", "field": "preview_audio_key", "newPath": "new/preview.opus"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert db.scalar(select(Episode.preview_audio_key).where(Episode.id == "ep-1")) == "new/preview.opus"


def test_update_audio_path_errors(client, catalog, admin_headers):
    payload = {"slug": FILM_SLUG, "episodeFolder": "e1", "field": "preview_audio_key", "newPath": "p.opus"}

    bad_folder = client.post("/admin/update-audio-path", json={**payload, "episodeFolder": "intro"}, headers=admin_headers)
    assert bad_folder.status_code == 400

    bad_field = client.post("/admin/update-audio-path", json={**payload, "field": "cover_key"}, headers=admin_headers)
    assert bad_field.status_code == 400

    missing = client.post("/admin/update-audio-path", json={**payload, "slug": "nope"}, headers=admin_headers)
    assert missing.status_code == 404

    no_token = client.post("/admin/update-audio-path", json=payload)
    assert no_token.status_code == 401
