from __future__ import annotations

from subdeck.models import ContentItem

FILM_SLUG = "my-film"


def test_list_items(client, catalog, db):
    db.add(ContentItem(id="film-2", slug="another", title="Another", main_language="en", type="series"))
    db.commit()
    client.post("/api/content/like", json={"user_id": "user-1", "film_id": FILM_SLUG})

    response = client.get("/items")
    assert response.status_code == 200
    items = {item["id"]: item for item in response.json()}
    assert set(items) == {"another", FILM_SLUG}
    assert items[FILM_SLUG]["like_count"] == 1
    assert items["another"]["like_count"] == 0
    assert items["another"]["level_framework_stats"] is None


def test_get_item_decodes_stored_stats(client, catalog):
    response = client.get(f"/items/{FILM_SLUG}")
    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "My Film"
    assert body["episodes"] == 2
    assert body["num_cards"] == 10
    assert body["cover_url"] == f"https://cdn.test/items/{FILM_SLUG}/cover.jpg"
    assert body["level_framework_stats"] == [
        {"framework": "JLPT", "language": "ja", "levels": {"N5": 60.0, "N4": 40.0}}
    ]


def test_get_item_accepts_framework_mapping(client, catalog, db):
    film = db.get(ContentItem, "film-1")
    film.level_framework_stats = {"CEFR": {"language": "en", "levels": {"A1": 100}}}
    db.commit()

    stats = client.get(f"/items/{FILM_SLUG}").json()["level_framework_stats"]
    assert stats == [{"framework": "CEFR", "language": "en", "levels": {"A1": 100.0}}]


def test_get_item_not_found(client, catalog):
    response = client.get("/items/nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Content not found"}


def test_list_episodes(client, catalog):
    response = client.get(f"/items/{FILM_SLUG}/episodes")
    assert response.status_code == 200
    episodes = response.json()
    assert [e["episode_number"] for e in episodes] == [1, 2]
    assert episodes[0]["preview_audio_key"] == f"items/{FILM_SLUG}/episodes/e1/preview/preview.mp3"
