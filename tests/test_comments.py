from __future__ import annotations

from sqlalchemy import func, select

from subdeck.models import ContentItem, Episode, EpisodeComment, EpisodeCommentVote

FILM_SLUG = "my-film"


def _create(client, text="Nice episode", user_id="user-1", film_slug=FILM_SLUG, episode_slug=f"{FILM_SLUG}_1"):
    return client.post(
        "/api/episodes/comments",
        json={"user_id": user_id, "episode_slug": episode_slug, "film_slug": film_slug, "text": text},
    )


def _vote(client, comment_id, vote_type, user_id="user-2"):
    return client.post(
        "/api/episodes/comments/vote",
        json={"user_id": user_id, "comment_id": comment_id, "vote_type": vote_type},
    )


def test_create_comment_trims_text(client, catalog):
    """Leading and trailing whitespace is removed before storing."""
    response = _create(client, text=" hello ")
    assert response.status_code == 200
    body = response.json()
    assert body["text"] == "hello"
    assert body["upvotes"] == body["downvotes"] == body["score"] == 0
    assert body["display_name"] == "User 1"
    assert body["photo_url"] == "https://img.test/1.png"


def test_create_comment_film_slug_is_case_insensitive(client, catalog):
    response = _create(client, film_slug=FILM_SLUG.upper())
    assert response.status_code == 200


def test_create_comment_rejects_oversized_text(client, catalog, db):
    response = _create(client, text="x" * 5001)
    assert response.status_code == 400
    assert "text" in response.json()["error"]
    assert db.scalar(select(func.count(EpisodeComment.id))) == 0


def test_create_comment_rejects_blank_text(client, catalog, db):
    response = _create(client, text="   ")
    assert response.status_code == 400
    assert db.scalar(select(func.count(EpisodeComment.id))) == 0


def test_create_comment_missing_fields(client, catalog):
    response = client.post("/api/episodes/comments", json={"user_id": "user-1"})
    assert response.status_code == 400
    error = response.json()["error"]
    assert error.startswith("Missing required parameters")
    assert "film_slug" in error and "text" in error


def test_create_comment_unknown_content(client, catalog):
    response = _create(client, film_slug="nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Content not found"}


def test_create_comment_unknown_episode(client, catalog):
    response = _create(client, episode_slug="nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Episode not found"}


def test_list_comments_requires_params(client, catalog):
    response = client.get("/api/episodes/comments", params={"film_slug": FILM_SLUG})
    assert response.status_code == 400
    assert "episode_slug" in response.json()["error"]


def test_list_comments_orders_by_score_then_newest(client, catalog, db):
    rows = [
        EpisodeComment(id="c-old-5", user_id="user-1", episode_id="ep-1", content_item_id="film-1",
                       text="old five", upvotes=5, score=5, created_at=1000, updated_at=1000),
        EpisodeComment(id="c-new-5", user_id="user-2", episode_id="ep-1", content_item_id="film-1",
                       text="new five", upvotes=5, score=5, created_at=3000, updated_at=3000),
        EpisodeComment(id="c-2", user_id="user-3", episode_id="ep-1", content_item_id="film-1",
                       text="two", upvotes=2, score=2, created_at=2000, updated_at=2000),
        EpisodeComment(id="c-other-episode", user_id="user-3", episode_id="ep-2", content_item_id="film-1",
                       text="elsewhere", upvotes=9, score=9, created_at=4000, updated_at=4000),
    ]
    db.add_all(rows)
    db.commit()

    response = client.get(
        "/api/episodes/comments",
        params={"episode_slug": f"{FILM_SLUG}_1", "film_slug": FILM_SLUG},
    )
    assert response.status_code == 200
    assert [c["id"] for c in response.json()] == ["c-new-5", "c-old-5", "c-2"]


def test_vote_twice_removes_vote(client, catalog):
    comment_id = _create(client).json()["id"]

    first = _vote(client, comment_id, 1)
    assert first.status_code == 200
    assert first.json() == {"success": True, "upvotes": 1, "downvotes": 0, "score": 1, "user_vote": 1}

    second = _vote(client, comment_id, 1)
    assert second.json() == {"success": True, "upvotes": 0, "downvotes": 0, "score": 0, "user_vote": None}


def test_vote_switch_moves_counter(client, catalog, db):
    comment_id = _create(client).json()["id"]

    _vote(client, comment_id, 1)
    response = _vote(client, comment_id, -1)
    assert response.json() == {"success": True, "upvotes": 0, "downvotes": 1, "score": -1, "user_vote": -1}
    votes = db.scalars(select(EpisodeCommentVote.vote_type).where(EpisodeCommentVote.comment_id == comment_id)).all()
    assert votes == [-1]


def test_votes_from_several_users_stay_consistent(client, catalog, db):
    """Counters always equal the number of stored votes of each type."""
    comment_id = _create(client).json()["id"]

    _vote(client, comment_id, 1, user_id="user-1")
    _vote(client, comment_id, 1, user_id="user-2")
    _vote(client, comment_id, -1, user_id="user-3")
    _vote(client, comment_id, -1, user_id="user-2")
    final = _vote(client, comment_id, -1, user_id="user-3").json()

    assert final["upvotes"] == db.scalar(
        select(func.count()).where(EpisodeCommentVote.comment_id == comment_id, EpisodeCommentVote.vote_type == 1)
    )
    assert final["downvotes"] == db.scalar(
        select(func.count()).where(EpisodeCommentVote.comment_id == comment_id, EpisodeCommentVote.vote_type == -1)
    )
    assert (final["upvotes"], final["downvotes"], final["score"]) == (1, 1, 0)


def test_vote_rejects_invalid_type(client, catalog):
    comment_id = _create(client).json()["id"]
    response = _vote(client, comment_id, 2)
    assert response.status_code == 400
    assert "vote_type" in response.json()["error"]


def test_vote_unknown_comment(client, catalog):
    response = _vote(client, "missing", 1)
    assert response.status_code == 404
    assert response.json() == {"error": "Comment not found"}


def test_batch_vote_lookup(client, catalog):
    first = _create(client, text="first").json()["id"]
    second = _create(client, text="second").json()["id"]
    third = _create(client, text="third").json()["id"]
    _vote(client, first, 1)
    _vote(client, second, -1)

    response = client.get(
        "/api/episodes/comments/votes",
        params={"user_id": "user-2", "comment_ids": f"{first},{second},{third}"},
    )
    assert response.status_code == 200
    assert response.json() == {first: 1, second: -1}


def test_batch_vote_lookup_empty_ids(client, catalog):
    response = client.get("/api/episodes/comments/votes", params={"user_id": "user-2", "comment_ids": " , "})
    assert response.status_code == 200
    assert response.json() == {}


def test_vote_rejects_non_integer_types(client, catalog, db):
    """Booleans and numeric strings are not vote types."""
    comment_id = _create(client).json()["id"]

    for vote_type in (True, "1", 1.0):
        response = _vote(client, comment_id, vote_type)
        assert response.status_code == 400
        assert "vote_type" in response.json()["error"]

    assert db.scalar(select(func.count(EpisodeCommentVote.id))) == 0
    assert db.scalar(select(EpisodeComment.upvotes).where(EpisodeComment.id == comment_id)) == 0


def test_vote_switch_from_downvote_to_upvote(client, catalog):
    comment_id = _create(client).json()["id"]

    assert _vote(client, comment_id, -1).json() == {
        "success": True, "upvotes": 0, "downvotes": 1, "score": -1, "user_vote": -1,
    }
    assert _vote(client, comment_id, 1).json() == {
        "success": True, "upvotes": 1, "downvotes": 0, "score": 1, "user_vote": 1,
    }


def test_vote_counters_never_go_negative(client, catalog, db):
    """Removing a vote from a counter that drifted to 0 leaves it at 0."""
    db.add(EpisodeComment(id="c-drift", user_id="user-1", episode_id="ep-1", content_item_id="film-1",
                          text="drifted", upvotes=0, downvotes=0, score=0, created_at=1000, updated_at=1000))
    db.add(EpisodeCommentVote(id="v-drift", user_id="user-2", comment_id="c-drift", vote_type=1))
    db.commit()

    response = _vote(client, "c-drift", 1)
    assert response.json() == {"success": True, "upvotes": 0, "downvotes": 0, "score": 0, "user_vote": None}


def test_film_slug_prefers_exact_spelling(client, catalog, db):
    """Slugs differing only in case resolve without ambiguity."""
    db.add(ContentItem(id="film-upper", slug=FILM_SLUG.upper(), title="Shouting", main_language="en"))
    db.add(Episode(id="ep-upper", content_item_id="film-upper", episode_number=1, slug=f"{FILM_SLUG}_1"))
    db.commit()

    exact = _create(client, film_slug=FILM_SLUG)
    assert exact.status_code == 200
    upper = _create(client, film_slug=FILM_SLUG.upper())
    assert upper.status_code == 200
    mixed = _create(client, film_slug="My-Film")
    assert mixed.status_code == 200

    owners = dict(db.execute(select(EpisodeComment.id, EpisodeComment.content_item_id)).all())
    assert owners[exact.json()["id"]] == "film-1"
    assert owners[upper.json()["id"]] == "film-upper"
    assert owners[mixed.json()["id"]] in {"film-1", "film-upper"}

    listed = client.get("/api/episodes/comments", params={"episode_slug": f"{FILM_SLUG}_1", "film_slug": FILM_SLUG})
    assert listed.status_code == 200
