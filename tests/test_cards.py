from __future__ import annotations

from sqlalchemy import select

from subdeck.models import UserCardState
from subdeck.services.card_state_service import distribute

FILM_SLUG = "my-film"


def _save(client, card_id, user_id="user-1"):
    return client.post("/api/card/save", json={"user_id": user_id, "card_id": card_id})


def _set_state(client, card_id, srs_state, user_id="user-1"):
    return client.post("/api/card/srs-state", json={"user_id": user_id, "card_id": card_id, "srs_state": srs_state})


def _saved_count(client, user_id="user-1"):
    response = client.get("/api/content/saved-cards-count", params={"user_id": user_id, "film_id": FILM_SLUG})
    assert response.status_code == 200
    return response.json()["count"]


def test_save_toggle(client, catalog, db):
    assert _save(client, "card-1").json() == {"saved": True}
    state = db.scalars(select(UserCardState).where(UserCardState.card_id == "card-1")).one()
    assert (state.srs_state, state.film_id, state.episode_id) == ("new", FILM_SLUG, "ep-1")

    assert _save(client, "card-1").json() == {"saved": False}
    assert db.scalar(select(UserCardState.srs_state).where(UserCardState.card_id == "card-1")) == "none"


def test_saved_count_ignores_unsaved_states(client, catalog):
    _save(client, "card-1")
    _save(client, "card-2")
    _set_state(client, "card-3", "good")
    _set_state(client, "card-4", "none")
    _save(client, "card-2")
    _save(client, "card-5", user_id="user-2")

    assert _saved_count(client) == 2
    assert _saved_count(client, user_id="user-2") == 1
    assert _saved_count(client, user_id="user-3") == 0


def test_srs_state_update_and_status(client, catalog):
    response = _set_state(client, "card-1", "hard")
    assert response.status_code == 200
    assert response.json() == {"success": True, "srs_state": "hard"}

    status = client.get("/api/card/save-status", params={"user_id": "user-1", "card_id": "card-1"}).json()
    assert status == {"saved": True, "srs_state": "hard", "review_count": 0}

    unsaved = client.get("/api/card/save-status", params={"user_id": "user-2", "card_id": "card-1"}).json()
    assert unsaved == {"saved": False, "srs_state": "none", "review_count": 0}


def test_srs_state_rejects_unknown_state(client, catalog):
    response = _set_state(client, "card-1", "mastered")
    assert response.status_code == 400
    assert "srs_state" in response.json()["error"]


def test_save_unknown_card(client, catalog):
    response = _save(client, "card-404")
    assert response.status_code == 404
    assert response.json() == {"error": "Card not found"}


def test_srs_distribution(client, catalog):
    for card_id in ("card-1", "card-2", "card-3"):
        _save(client, card_id)
    _set_state(client, "card-4", "good")

    response = client.get("/api/srs/distribution", params={"user_id": "user-1", "film_id": FILM_SLUG})
    assert response.status_code == 200
    assert response.json() == {"none": 60, "new": 30, "again": 0, "hard": 0, "good": 10, "easy": 0}


def test_srs_distribution_without_saved_cards(client, catalog):
    response = client.get("/api/srs/distribution", params={"user_id": "user-3", "film_id": FILM_SLUG})
    assert response.json()["none"] == 100


def test_distribute_always_sums_to_100():
    result = distribute(3, {"new": 1, "good": 1, "easy": 1})
    assert sum(result.model_dump().values()) == 100
    assert result.none == 0

    result = distribute(7, {"new": 2, "again": 1, "none": 3})
    assert sum(result.model_dump().values()) == 100
    assert (result.new, result.again, result.none) == (29, 14, 57)


def test_distribute_empty():
    assert distribute(0, {}).none == 100
    assert distribute(10, {"none": 4}).none == 100
