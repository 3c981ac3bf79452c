from __future__ import annotations

from sqlalchemy import select

from subdeck.models import ContentLike, ContentLikeCount

FILM_SLUG = "my-film"


def _toggle(client, user_id, film_id=FILM_SLUG):
    return client.post("/api/content/like", json={"user_id": user_id, "film_id": film_id})


def test_toggle_like_sequence(client, catalog):
    assert _toggle(client, "user-1").json() == {"liked": True, "like_count": 1}
    assert _toggle(client, "user-1").json() == {"liked": False, "like_count": 0}
    assert _toggle(client, "user-2").json() == {"liked": True, "like_count": 1}


def test_counter_matches_like_rows(client, catalog, db):
    for user_id in ("user-1", "user-2", "user-3", "user-2"):
        _toggle(client, user_id)

    rows = db.scalars(select(ContentLike.user_id).where(ContentLike.content_item_id == "film-1")).all()
    assert sorted(rows) == ["user-1", "user-3"]
    assert db.scalar(select(ContentLikeCount.like_count).where(ContentLikeCount.content_item_id == "film-1")) == 2


def test_counter_never_goes_negative(client, catalog, db):
    """A counter that drifted to 0 stays at 0 when a like is removed."""
    _toggle(client, "user-1")
    db.get(ContentLikeCount, "film-1").like_count = 0
    db.commit()

    response = _toggle(client, "user-1")
    assert response.json() == {"liked": False, "like_count": 0}


def test_like_count_and_status(client, catalog):
    assert client.get("/api/content/like-count", params={"film_id": FILM_SLUG}).json() == {"count": 0}
    assert client.get(
        "/api/content/like-status", params={"user_id": "user-1", "film_id": FILM_SLUG}
    ).json() == {"liked": False}

    _toggle(client, "user-1")

    assert client.get("/api/content/like-count", params={"film_id": FILM_SLUG}).json() == {"count": 1}
    assert client.get(
        "/api/content/like-status", params={"user_id": "user-1", "film_id": FILM_SLUG}
    ).json() == {"liked": True}
    assert client.get(
        "/api/content/like-status", params={"user_id": "user-2", "film_id": FILM_SLUG}
    ).json() == {"liked": False}


def test_like_count_unknown_content_is_zero(client, catalog):
    assert client.get("/api/content/like-count", params={"film_id": "nope"}).json() == {"count": 0}


def test_toggle_like_unknown_content(client, catalog):
    response = _toggle(client, "user-1", film_id="nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Content not found"}


def test_like_requires_params(client, catalog):
    response = client.post("/api/content/like", json={"user_id": "user-1"})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required parameters (film_id)"}

    response = client.get("/api/content/like-status", params={"film_id": FILM_SLUG})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required parameters (user_id)"}
