from datetime import datetime, timedelta
from http import HTTPStatus


def test_posts_require_authentication(client):
    assert client.get("/posts").status_code == HTTPStatus.UNAUTHORIZED
    assert client.get("/posts/my-posts").status_code == HTTPStatus.UNAUTHORIZED
    response = client.post("/posts", json={"title": "T", "content": "C"})
    assert response.status_code == HTTPStatus.UNAUTHORIZED
    assert response.json()["message"] == "Missing authentication token"


def test_invalid_bearer_token_is_unauthorized(client):
    response = client.get("/posts", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == HTTPStatus.UNAUTHORIZED
    assert response.json()["message"] == "Invalid token"


def test_token_for_deleted_user_is_unauthorized(client, db_session, user_factory, auth_headers):
    user = user_factory(email="gone@example.com")
    headers = auth_headers(user)
    db_session.delete(user)
    db_session.commit()

    response = client.get("/posts", headers=headers)
    assert response.status_code == HTTPStatus.UNAUTHORIZED


def test_create_post_sets_author_from_token(client, user_factory, auth_headers):
    alice = user_factory(email="alice@example.com")
    bob = user_factory(email="bob@example.com")

    response = client.post(
        "/posts",
        json={"title": "Hello", "content": "World", "authorId": bob.id, "author_id": bob.id},
        headers=auth_headers(alice),
    )
    assert response.status_code == HTTPStatus.CREATED

    data = response.json()
    assert data["title"] == "Hello"
    assert data["content"] == "World"
    assert data["published"] is True
    assert data["authorId"] == alice.id
    assert data["author"]["email"] == "alice@example.com"
    assert "passwordHash" not in data["author"]


def test_create_post_validates_body(client, user_factory, auth_headers):
    alice = user_factory(email="alice@example.com")

    response = client.post("/posts", json={"title": ""}, headers=auth_headers(alice))
    assert response.status_code == HTTPStatus.BAD_REQUEST


def test_create_then_get_returns_equal_post(client, user_factory, auth_headers):
    alice = user_factory(email="alice@example.com")
    headers = auth_headers(alice)

    created = client.post(
        "/posts", json={"title": "T", "content": "C", "published": False}, headers=headers
    ).json()
    fetched = client.get(f"/posts/{created['id']}", headers=headers)

    assert fetched.status_code == HTTPStatus.OK
    assert fetched.json() == created


def test_get_missing_post_returns_404(client, user_factory, auth_headers):
    alice = user_factory(email="alice@example.com")

    response = client.get("/posts/999", headers=auth_headers(alice))
    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.json()["message"] == "Post with ID 999 not found"


def test_list_posts_newest_first_and_my_posts_filtered(
    client, db_session, user_factory, post_factory, auth_headers
):
    alice = user_factory(email="alice@example.com")
    bob = user_factory(email="bob@example.com")
    oldest = post_factory(alice, title="oldest")
    newest = post_factory(bob, title="newest")
    middle = post_factory(alice, title="middle")

    now = datetime.utcnow()
    oldest.created_at = now - timedelta(hours=2)
    middle.created_at = now - timedelta(hours=1)
    newest.created_at = now
    db_session.commit()

    all_posts = client.get("/posts", headers=auth_headers(bob)).json()
    assert [p["title"] for p in all_posts] == ["newest", "middle", "oldest"]
    assert all(p["author"]["id"] == p["authorId"] for p in all_posts)

    mine = client.get("/posts/my-posts", headers=auth_headers(alice)).json()
    assert [p["title"] for p in mine] == ["middle", "oldest"]
    assert [p for p in all_posts if p["authorId"] == alice.id] == mine


def test_partial_update_only_touches_given_fields(client, user_factory, post_factory, auth_headers):
    alice = user_factory(email="alice@example.com")
    post = post_factory(alice, title="before", content="body", published=False)

    response = client.patch(
        f"/posts/{post.id}", json={"title": "after"}, headers=auth_headers(alice)
    )
    assert response.status_code == HTTPStatus.OK

    data = response.json()
    assert data["title"] == "after"
    assert data["content"] == "body"
    assert data["published"] is False
    assert data["authorId"] == alice.id


def test_update_with_null_leaves_field_untouched(client, user_factory, post_factory, auth_headers):
    alice = user_factory(email="alice@example.com")
    post = post_factory(alice, title="keep", content="body")

    response = client.patch(
        f"/posts/{post.id}", json={"title": None, "published": False}, headers=auth_headers(alice)
    )
    assert response.status_code == HTTPStatus.OK
    assert response.json()["title"] == "keep"
    assert response.json()["published"] is False


def test_non_owner_update_is_forbidden_and_post_unchanged(
    client, user_factory, post_factory, auth_headers
):
    alice = user_factory(email="alice@example.com")
    bob = user_factory(email="bob@example.com")
    post = post_factory(alice, title="original")

    response = client.patch(f"/posts/{post.id}", json={"title": "x"}, headers=auth_headers(bob))
    assert response.status_code == HTTPStatus.FORBIDDEN
    assert response.json()["message"] == "You can only update your own posts"

    refetched = client.get(f"/posts/{post.id}", headers=auth_headers(bob)).json()
    assert refetched["title"] == "original"


def test_update_and_delete_of_missing_post_is_404_for_anyone(client, user_factory, auth_headers):
    bob = user_factory(email="bob@example.com")

    patch = client.patch("/posts/12345", json={"title": "x"}, headers=auth_headers(bob))
    delete = client.delete("/posts/12345", headers=auth_headers(bob))

    assert patch.status_code == HTTPStatus.NOT_FOUND
    assert delete.status_code == HTTPStatus.NOT_FOUND


def test_non_owner_delete_is_forbidden(client, user_factory, post_factory, auth_headers):
    alice = user_factory(email="alice@example.com")
    bob = user_factory(email="bob@example.com")
    post = post_factory(alice)

    response = client.delete(f"/posts/{post.id}", headers=auth_headers(bob))
    assert response.status_code == HTTPStatus.FORBIDDEN
    assert response.json()["message"] == "You can only delete your own posts"
    assert client.get(f"/posts/{post.id}", headers=auth_headers(bob)).status_code == HTTPStatus.OK


def test_owner_delete_removes_post(client, user_factory, post_factory, auth_headers):
    alice = user_factory(email="alice@example.com")
    post = post_factory(alice)
    headers = auth_headers(alice)

    response = client.delete(f"/posts/{post.id}", headers=headers)
    assert response.status_code == HTTPStatus.NO_CONTENT
    assert response.content == b""

    assert client.get(f"/posts/{post.id}", headers=headers).status_code == HTTPStatus.NOT_FOUND
    assert client.delete(f"/posts/{post.id}", headers=headers).status_code == HTTPStatus.NOT_FOUND


def test_unknown_route_uses_error_body(client):
    response = client.get("/nope")
    assert response.status_code == HTTPStatus.NOT_FOUND
    body = response.json()
    assert body["statusCode"] == HTTPStatus.NOT_FOUND
    assert body["path"] == "/nope"
    assert body["method"] == "GET"
