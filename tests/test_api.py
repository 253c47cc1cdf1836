"""HTTP surface tests against the in-memory store."""

from __future__ import annotations

from postgrest import APIError


def test_join_and_duplicate_join(api, community) -> None:
    response = api.post(f"/communities/{community['id']}/join")
    assert response.status_code == 200
    assert response.json() == {
        "community_id": community["id"],
        "is_member": True,
        "member_count": 1,
    }

    again = api.post(f"/communities/{community['id']}/join")
    assert again.status_code == 409
    assert again.json()["code"] == "ALREADY_MEMBER"


def test_leave_without_membership(api, community) -> None:
    response = api.post(f"/communities/{community['id']}/leave")
    assert response.status_code == 403
    assert response.json()["code"] == "NOT_MEMBER"


def test_create_challenge_lists_every_field_error(api) -> None:
    response = api.post(
        "/challenges",
        json={
            "title": "Hi",
            "description": "short",
            "community_id": "",
            "start_date": "",
            "end_date": "",
        },
    )
    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert set(body["fields"]) == {
        "title",
        "description",
        "community_id",
        "start_date",
        "end_date",
    }


def test_vote_requires_membership(api, fake_db, active_challenge) -> None:
    submission = fake_db.seed(
        "submissions",
        challenge_id=active_challenge["id"],
        user_id="bob",
        title="Bob's run",
        content_url="https://youtu.be/dQw4w9WgXcQ",
        submission_type="video",
        vote_count=0,
    )
    response = api.post(f"/submissions/{submission['id']}/vote")
    assert response.status_code == 403
    assert response.json()["code"] == "NOT_MEMBER"


def test_community_page_reports_membership(api, fake_db, community) -> None:
    fake_db.seed("community_memberships", user_id="alice", community_id=community["id"])
    response = api.get(f"/communities/{community['id']}")

    assert response.status_code == 200
    body = response.json()
    assert body["is_member"] is True
    assert body["community"]["leader"]["username"] == "leader"


def test_storage_failure_is_retryable(api, fake_db) -> None:
    fake_db.fail_next(APIError({"message": "upstream timeout", "code": "57014"}))
    response = api.get("/communities")

    assert response.status_code == 503
    assert response.json()["code"] == "STORAGE_ERROR"
    assert response.headers["Retry-After"] == "1"


def test_update_profile(api) -> None:
    response = api.patch("/profiles/me", json={"bio": "Speedrunner"})
    assert response.status_code == 200
    assert response.json()["bio"] == "Speedrunner"


def test_create_community_makes_caller_leader(api, fake_db) -> None:
    response = api.post(
        "/communities",
        json={"name": "Chess Club", "description": "Daily puzzles and weekly blitz"},
    )

    assert response.status_code == 200
    community = response.json()["community"]
    assert community["leader_id"] == "alice"
    assert community["member_count"] == 1
    assert [row["user_id"] for row in fake_db.rows("community_memberships")] == ["alice"]


def test_profile_badges(api, fake_db) -> None:
    badge = fake_db.seed("badges", name="First Challenge")
    fake_db.seed(
        "user_badges",
        user_id="alice",
        badge_id=badge["id"],
        earned_at="2026-03-01T10:00:00+00:00",
    )

    response = api.get("/profiles/alice/badges")

    assert response.status_code == 200
    assert [row["badge"]["name"] for row in response.json()] == ["First Challenge"]
