from __future__ import annotations

import os
import tempfile
from pathlib import Path
from types import SimpleNamespace
from typing import Generator

_TEST_DIR = Path(tempfile.mkdtemp(prefix="subdeck-tests-"))
_DB_PATH = _TEST_DIR / "test.db"

# Must be set before subdeck.core.config is imported
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["MEDIA_ROOT"] = str(_TEST_DIR / "media")
os.environ["STORAGE_BACKEND"] = "local"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["EXPOSE_INTERNAL_ERRORS"] = "true"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from subdeck.core.security import create_access_token
from subdeck.db.base import Base
from subdeck.main import app
from subdeck.models import Card, ContentItem, Episode, User
from subdeck.services.storage_service import LocalStorage, set_storage

# Synchronous handle on the same SQLite file for seeding and assertions
sync_engine = create_engine(f"sqlite:///{_DB_PATH}", isolation_level="AUTOCOMMIT")

FILM_SLUG = "my-film"


@pytest.fixture(scope="session", autouse=True)
def bootstrap() -> Generator[None, None, None]:
    Base.metadata.create_all(sync_engine)
    yield
    sync_engine.dispose()


@pytest.fixture(autouse=True)
def clean_tables() -> Generator[None, None, None]:
    yield
    with sync_engine.connect() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture(autouse=True)
def storage(tmp_path) -> Generator[LocalStorage, None, None]:
    backend = LocalStorage(tmp_path / "media", base_url="https://cdn.test")
    set_storage(backend)
    yield backend
    set_storage(None)


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def db() -> Generator[Session, None, None]:
    """Create a database session for seeding and checking rows."""
    session = Session(sync_engine, expire_on_commit=True)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token('admin-1', role='admin')}"}


@pytest.fixture()
def catalog(db: Session) -> SimpleNamespace:
    """Three users, one film with two episodes, ten cards in episode 1."""
    users = [User(id=f"user-{n}", display_name=f"User {n}", photo_url=f"https://img.test/{n}.png") for n in (1, 2, 3)]
    film = ContentItem(
        id="film-1",
        slug=FILM_SLUG,
        title="My Film",
        main_language="ja",
        type="movie",
        total_episodes=2,
        num_cards=10,
        cover_key=f"items/{FILM_SLUG}/cover.jpg",
        level_framework_stats='[{"framework": "JLPT", "language": "ja", "levels": {"N5": 60, "N4": 40}}]',
    )
    episodes = [
        Episode(
            id=f"ep-{n}",
            content_item_id=film.id,
            episode_number=n,
            slug=f"{FILM_SLUG}_{n}",
            title=f"Episode {n}",
            preview_audio_key=f"items/{FILM_SLUG}/episodes/e{n}/preview/preview.mp3",
        )
        for n in (1, 2)
    ]
    cards = [
        Card(
            id=f"card-{n}",
            episode_id="ep-1",
            card_number=n,
            audio_key=f"items/{FILM_SLUG}/episodes/e1/cards/{n}_audio.mp3",
        )
        for n in range(1, 11)
    ]
    db.add_all([*users, film, *episodes, *cards])
    db.commit()
    return SimpleNamespace(film=film, episodes=episodes, cards=cards, users=users)
