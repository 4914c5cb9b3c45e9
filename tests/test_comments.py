import pytest

from errors import Forbidden, NotFound, ValidationError
from services import comments as comment_service
from services import forums as forum_service


@pytest.fixture
def forum(make_user):
    owner = make_user()
    return forum_service.create_forum(owner.id, "Thread", "Body")


def test_create_and_list_newest_first(client, forum, make_user, auth_headers):
    user = make_user()
    for text in ("one", "two", "three"):
        response = client.post(f"/comments/{forum.id}", json={"content": text}, headers=auth_headers(user))
        assert response.status_code == 201
    created = response.json()["data"]
    assert created["authorId"] == user.id
    assert created["forumId"] == forum.id

    body = client.get(f"/comments/{forum.id}", params={"page": 1, "limit": 2}).json()
    assert [c["content"] for c in body["data"]] == ["three", "two"]
    assert body["pagination"] == {"total": 3, "pages": 2, "page": 1, "limit": 2}

    second = client.get(f"/comments/{forum.id}", params={"page": 2, "limit": 2}).json()
    assert [c["content"] for c in second["data"]] == ["one"]


@pytest.mark.parametrize("body", [{"content": "valid"}, {"content": ""}, {}])
def test_missing_forum_is_not_found_regardless_of_content(client, make_user, auth_headers, body):
    response = client.post("/comments/424242", json=body, headers=auth_headers(make_user()))
    assert response.status_code == 404


def test_empty_content_is_rejected(client, forum, make_user, auth_headers):
    response = client.post(f"/comments/{forum.id}", json={"content": "  "}, headers=auth_headers(make_user()))
    assert response.status_code == 400
    assert response.json()["error"] == "Content is required"


def test_create_requires_authentication(client, forum):
    assert client.post(f"/comments/{forum.id}", json={"content": "hi"}).status_code == 401


def test_delete_rules(client, forum, make_user, auth_headers):
    author = make_user()
    other = make_user()
    comment = client.post(
        f"/comments/{forum.id}", json={"content": "mine"}, headers=auth_headers(author)
    ).json()["data"]

    assert client.delete(f"/comments/{forum.id}", params={"commentId": comment["id"]}).status_code == 401
    assert client.delete(f"/comments/{forum.id}", headers=auth_headers(author)).status_code == 400
    assert client.delete(
        f"/comments/{forum.id}", params={"commentId": 999}, headers=auth_headers(author)
    ).status_code == 404
    assert client.delete(
        f"/comments/{forum.id}", params={"commentId": comment["id"]}, headers=auth_headers(other)
    ).status_code == 403

    response = client.delete(f"/comments/{forum.id}", params={"commentId": comment["id"]}, headers=auth_headers(author))
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert client.get(f"/comments/{forum.id}").json()["data"] == []


def test_list_for_missing_forum(client):
    assert client.get("/comments/31337").status_code == 404


def test_list_page_far_beyond_the_end(client, forum, make_user, auth_headers):
    client.post(f"/comments/{forum.id}", json={"content": "only"}, headers=auth_headers(make_user()))
    response = client.get(f"/comments/{forum.id}", params={"page": 10**18})
    assert response.status_code == 200
    assert response.json()["data"] == []
    assert response.json()["pagination"]["total"] == 1


class TestCommentService:
    def test_delete_under_wrong_forum(self, forum, make_user):
        author = make_user()
        other_forum = forum_service.create_forum(author.id, "Other", "Body")
        comment = comment_service.create_comment(author.id, forum.id, "hello")
        with pytest.raises(NotFound):
            comment_service.delete_comment(author.id, comment.id, forum_id=other_forum.id)

    def test_delete_by_non_author(self, forum, make_user):
        comment = comment_service.create_comment(make_user().id, forum.id, "hello")
        with pytest.raises(Forbidden):
            comment_service.delete_comment(make_user().id, comment.id)

    def test_content_too_long(self, forum, make_user):
        with pytest.raises(ValidationError):
            comment_service.create_comment(make_user().id, forum.id, "x" * 5000)
