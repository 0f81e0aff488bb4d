# tests/api/test_lessons.py
"""Tests for lesson endpoints."""

from datetime import datetime, timedelta

import pytest
from fastapi import status

from rewise.models import Lesson, LessonLike
from tests.factories import MISSING_ID

LESSON_PAYLOAD = {
    "title": "Say no sooner",
    "body": "Agreeing to everything left me no time for what mattered.",
    "category": "career",
    "emotionalTag": "regret",
    "image": "https://img.test/no.png",
    "visibility": "public",
    "accessLevel": "free",
}


class TestCreateAndRead:
    def test_create_then_get_round_trip(self, client, test_user, auth_token) -> None:
        response = client.post("/api/lessons", json=LESSON_PAYLOAD, headers=auth_token)
        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["message"] == "Lesson created successfully"
        lesson_id = data["lessonId"]
        assert len(lesson_id) == 32

        response = client.get(f"/api/lessons/{lesson_id}")
        assert response.status_code == status.HTTP_200_OK
        lesson = response.json()
        assert lesson["title"] == LESSON_PAYLOAD["title"]
        assert lesson["body"] == LESSON_PAYLOAD["body"]
        assert lesson["emotionalTag"] == "regret"
        assert lesson["creatorEmail"] == test_user.email
        assert lesson["likeCount"] == 0
        assert lesson["featured"] is False
        assert lesson["reviewed"] is False

    def test_create_requires_authentication(self, client) -> None:
        response = client.post("/api/lessons", json=LESSON_PAYLOAD)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.parametrize("field", ["title", "body", "category", "emotionalTag"])
    def test_create_missing_field(self, client, test_user, auth_token, field) -> None:
        payload = {key: value for key, value in LESSON_PAYLOAD.items() if key != field}
        response = client.post("/api/lessons", json=payload, headers=auth_token)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["reason"] == "MissingField"

    def test_create_rejects_unknown_visibility(self, client, test_user, auth_token) -> None:
        payload = {**LESSON_PAYLOAD, "visibility": "friends"}
        response = client.post("/api/lessons", json=payload, headers=auth_token)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["reason"] == "InvalidInput"

    def test_free_user_cannot_create_premium(self, client, test_user, auth_token) -> None:
        payload = {**LESSON_PAYLOAD, "accessLevel": "premium"}
        response = client.post("/api/lessons", json=payload, headers=auth_token)
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["reason"] == "PremiumRequired"

    def test_premium_user_can_create_premium(self, client, premium_user, premium_auth_token) -> None:
        payload = {**LESSON_PAYLOAD, "accessLevel": "premium"}
        response = client.post("/api/lessons", json=payload, headers=premium_auth_token)
        assert response.status_code == status.HTTP_201_CREATED

    def test_malformed_id_is_400(self, client) -> None:
        response = client.get("/api/lessons/not-an-id")
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"detail": "Invalid lesson ID", "reason": "InvalidIdentifier"}

    def test_unknown_id_is_404(self, client) -> None:
        response = client.get(f"/api/lessons/{MISSING_ID}")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["reason"] == "NotFound"


class TestReadAccess:
    def test_private_lesson_hidden_from_others(
        self, client, test_user, other_user, other_auth_token, make_lesson
    ) -> None:
        lesson = make_lesson(test_user.email, visibility="private")
        for headers in ({}, other_auth_token):
            response = client.get(f"/api/lessons/{lesson.id}", headers=headers)
            assert response.status_code == status.HTTP_403_FORBIDDEN
            assert response.json()["reason"] == "PrivateContent"

    def test_private_lesson_visible_to_creator_and_admin(
        self, client, test_user, auth_token, admin_user, admin_auth_token, make_lesson
    ) -> None:
        lesson = make_lesson(test_user.email, visibility="private")
        assert client.get(f"/api/lessons/{lesson.id}", headers=auth_token).status_code == 200
        assert client.get(f"/api/lessons/{lesson.id}", headers=admin_auth_token).status_code == 200

    def test_premium_lesson_requires_premium(
        self, client, other_user, other_auth_token, premium_user, premium_auth_token, make_lesson
    ) -> None:
        lesson = make_lesson(premium_user.email, access_level="premium")
        response = client.get(f"/api/lessons/{lesson.id}", headers=other_auth_token)
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {
            "detail": "Premium subscription required",
            "reason": "PremiumRequired",
            "isPremiumContent": True,
        }
        response = client.get(f"/api/lessons/{lesson.id}", headers=premium_auth_token)
        assert response.status_code == status.HTTP_200_OK

    def test_premium_applies_to_non_premium_creator(
        self, client, test_user, auth_token, make_lesson
    ) -> None:
        lesson = make_lesson(test_user.email, access_level="premium")
        response = client.get(f"/api/lessons/{lesson.id}", headers=auth_token)
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["reason"] == "PremiumRequired"

    def test_invalid_token_on_public_read_is_anonymous(self, client, test_lesson) -> None:
        response = client.get(
            f"/api/lessons/{test_lesson.id}",
            headers={"Authorization": "Bearer not.a.valid.jwt"},
        )
        assert response.status_code == status.HTTP_200_OK


class TestUpdateAndDelete:
    def test_creator_updates_only_given_fields(self, client, test_lesson, auth_token) -> None:
        response = client.patch(
            f"/api/lessons/{test_lesson.id}",
            json={"title": "Patience pays, usually"},
            headers=auth_token,
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["title"] == "Patience pays, usually"
        assert data["body"] == test_lesson.body
        assert data["category"] == test_lesson.category

    def test_other_user_cannot_update(self, client, test_lesson, other_user, other_auth_token) -> None:
        response = client.patch(
            f"/api/lessons/{test_lesson.id}",
            json={"title": "Hijacked"},
            headers=other_auth_token,
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["reason"] == "NotOwner"

    def test_admin_can_update(self, client, test_lesson, admin_user, admin_auth_token) -> None:
        response = client.patch(
            f"/api/lessons/{test_lesson.id}",
            json={"visibility": "private"},
            headers=admin_auth_token,
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["visibility"] == "private"

    def test_free_creator_cannot_upgrade_to_premium(self, client, test_lesson, auth_token) -> None:
        response = client.patch(
            f"/api/lessons/{test_lesson.id}",
            json={"accessLevel": "premium"},
            headers=auth_token,
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["reason"] == "PremiumRequired"

    def test_delete_removes_lesson_and_likes(
        self, client, db_session, test_lesson, auth_token, other_user, other_auth_token
    ) -> None:
        client.post(f"/api/lessons/{test_lesson.id}/like", headers=other_auth_token)

        response = client.delete(f"/api/lessons/{test_lesson.id}", headers=auth_token)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "Lesson deleted successfully"

        assert client.get(f"/api/lessons/{test_lesson.id}").status_code == 404
        assert db_session.query(LessonLike).count() == 0

    def test_other_user_cannot_delete(self, client, test_lesson, other_user, other_auth_token) -> None:
        response = client.delete(f"/api/lessons/{test_lesson.id}", headers=other_auth_token)
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["reason"] == "NotOwner"


class TestLikes:
    def test_like_count_tracks_like_set(
        self, client, db_session, test_lesson, test_user, auth_token, other_user, other_auth_token
    ) -> None:
        url = f"/api/lessons/{test_lesson.id}/like"

        response = client.post(url, headers=auth_token)
        assert response.json() == {"liked": True, "likeCount": 1}
        response = client.post(url, headers=other_auth_token)
        assert response.json() == {"liked": True, "likeCount": 2}
        response = client.post(url, headers=auth_token)
        assert response.json() == {"liked": False, "likeCount": 1}

        likes = db_session.query(LessonLike).filter(LessonLike.lesson_id == test_lesson.id).all()
        assert [like.user_email for like in likes] == [other_user.email]
        db_session.refresh(test_lesson)
        assert test_lesson.like_count == len(likes)

    def test_like_requires_read_access(
        self, client, other_user, other_auth_token, test_user, make_lesson
    ) -> None:
        lesson = make_lesson(test_user.email, visibility="private")
        response = client.post(f"/api/lessons/{lesson.id}/like", headers=other_auth_token)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_like_requires_authentication(self, client, test_lesson) -> None:
        response = client.post(f"/api/lessons/{test_lesson.id}/like")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestListing:
    def test_lists_only_public_with_pagination(self, client, test_user, make_lesson) -> None:
        base = datetime(2026, 1, 1)
        for i in range(12):
            make_lesson(test_user.email, title=f"Lesson {i}", created_at=base + timedelta(minutes=i))
        make_lesson(test_user.email, title="Secret", visibility="private")

        response = client.get("/api/lessons", params={"page": 2, "pageSize": 5})
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["pagination"] == {"page": 2, "pageSize": 5, "total": 12, "totalPages": 3}
        assert [lesson["title"] for lesson in data["lessons"]] == [
            "Lesson 6", "Lesson 5", "Lesson 4", "Lesson 3", "Lesson 2",
        ]

    def test_default_page_size(self, client, test_user, make_lesson) -> None:
        for i in range(11):
            make_lesson(test_user.email, title=f"Lesson {i}")
        data = client.get("/api/lessons").json()
        assert len(data["lessons"]) == 10
        assert data["pagination"]["totalPages"] == 2

    def test_filters(self, client, test_user, make_lesson) -> None:
        make_lesson(test_user.email, title="Forgive fast", category="relationships", emotional_tag="peace")
        make_lesson(test_user.email, title="Ship it", category="career", emotional_tag="pride")
        make_lesson(test_user.email, title="Ask for help", category="career", emotional_tag="relief", featured=True)

        def titles(**params) -> set[str]:
            return {item["title"] for item in client.get("/api/lessons", params=params).json()["lessons"]}

        assert titles(category="career") == {"Ship it", "Ask for help"}
        assert titles(emotionalTag="peace") == {"Forgive fast"}
        assert titles(search="SHIP") == {"Ship it"}
        assert titles(search="%") == set()
        assert titles(featured="true") == {"Ask for help"}
        assert titles(creatorEmail="nobody@example.com") == set()

    def test_anonymous_category_listing_is_public_and_newest_first(
        self, client, test_user, make_lesson
    ) -> None:
        base = datetime(2026, 1, 1)
        make_lesson(test_user.email, title="First job", category="career", created_at=base)
        make_lesson(
            test_user.email,
            title="Secret raise",
            category="career",
            visibility="private",
            created_at=base + timedelta(days=1),
        )
        make_lesson(test_user.email, title="Quit well", category="career", created_at=base + timedelta(days=2))
        make_lesson(test_user.email, title="Call home", category="family", created_at=base + timedelta(days=3))

        response = client.get("/api/lessons", params={"category": "career"})
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [item["title"] for item in data["lessons"]] == ["Quit well", "First job"]
        assert data["pagination"]["total"] == 2

    def test_sort_oldest_and_popular(self, client, test_user, make_lesson) -> None:
        base = datetime(2026, 1, 1)
        make_lesson(test_user.email, title="old", created_at=base, like_count=1)
        make_lesson(test_user.email, title="mid", created_at=base + timedelta(days=1), like_count=7)
        make_lesson(test_user.email, title="new", created_at=base + timedelta(days=2), like_count=3)

        def order(sort: str) -> list[str]:
            return [item["title"] for item in client.get("/api/lessons", params={"sort": sort}).json()["lessons"]]

        assert order("newest") == ["new", "mid", "old"]
        assert order("oldest") == ["old", "mid", "new"]
        assert order("popular") == ["mid", "new", "old"]
        assert order("bogus") == ["new", "mid", "old"]

    def test_premium_lessons_listed_locked(
        self, client, test_user, premium_user, premium_auth_token, make_lesson
    ) -> None:
        make_lesson(premium_user.email, title="Paid insight", access_level="premium")

        item = client.get("/api/lessons").json()["lessons"][0]
        assert item["locked"] is True
        assert item["body"] is None
        assert item["creator"]["email"] == premium_user.email
        assert item["creator"]["lessonCount"] == 1

        item = client.get("/api/lessons", headers=premium_auth_token).json()["lessons"][0]
        assert item["locked"] is False
        assert item["body"]

    def test_mine_includes_private(self, client, test_user, auth_token, other_user, make_lesson) -> None:
        make_lesson(test_user.email, title="Mine public")
        make_lesson(test_user.email, title="Mine private", visibility="private")
        make_lesson(other_user.email, title="Not mine")

        response = client.get("/api/lessons/mine", headers=auth_token)
        assert response.status_code == status.HTTP_200_OK
        titles = {item["title"] for item in response.json()["lessons"]}
        assert titles == {"Mine public", "Mine private"}

    def test_mine_requires_authentication(self, client) -> None:
        assert client.get("/api/lessons/mine").status_code == status.HTTP_401_UNAUTHORIZED


def test_lesson_model_defaults(db_session) -> None:
    lesson = Lesson(
        title="t",
        body="b",
        category="c",
        emotional_tag="e",
        creator_email="x@example.com",
    )
    db_session.add(lesson)
    db_session.commit()
    assert lesson.like_count == 0
    assert lesson.visibility == "public"
    assert lesson.access_level == "free"
    assert lesson.image == ""
    assert lesson.created_at is not None
