from urllib.parse import parse_qs, urlparse

import pytest

import config
import oauth_github
from auth import issue_session_token
from errors import ProviderError
from services.accounts import OAuthIdentity


def test_signup_login_me(client):
    response = client.post("/auth/signup", json={"name": "Dana", "email": "dana@example.com", "password": "secret123"})
    assert response.status_code == 201
    user = response.json()["data"]
    assert user["email"] == "dana@example.com"

    response = client.post("/auth/login", json={"email": "dana@example.com", "password": "secret123"})
    assert response.status_code == 200
    token = response.json()["data"]
    assert token["tokenType"] == "bearer"
    assert token["user"]["id"] == user["id"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token['accessToken']}"})
    assert me.json()["data"]["name"] == "Dana"


def test_signup_duplicate_and_validation(client):
    body = {"name": "Eve", "email": "eve@example.com", "password": "secret123"}
    assert client.post("/auth/signup", json=body).status_code == 201
    assert client.post("/auth/signup", json=body).status_code == 409
    assert client.post("/auth/signup", json={**body, "email": "x@example.com", "password": "123"}).status_code == 400
    assert client.post("/auth/signup", json={"name": "NoEmail"}).status_code == 400


def test_login_failure(client, make_user):
    make_user(email="frank@example.com")
    response = client.post("/auth/login", json={"email": "frank@example.com", "password": "nope-nope"})
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Invalid email or password"}


def test_me_rejects_bad_tokens(client):
    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401
    # A well-formed token for a user that does not exist
    ghost = issue_session_token(987654)
    assert client.get("/auth/me", headers={"Authorization": f"Bearer {ghost}"}).status_code == 401


def test_profile_forums(client, make_user, auth_headers):
    author = make_user()
    other = make_user()
    for title in ("First", "Second"):
        client.post("/forums", json={"title": title, "description": "d"}, headers=auth_headers(author))
    client.post("/forums", json={"title": "Not mine", "description": "d"}, headers=auth_headers(other))

    response = client.get("/profile/forums", headers=auth_headers(author))
    assert [f["title"] for f in response.json()["data"]] == ["Second", "First"]
    assert client.get("/profile/forums").status_code == 401


@pytest.fixture
def github_configured(monkeypatch):
    monkeypatch.setattr(config, "GITHUB_CLIENT_ID", "client-id")
    monkeypatch.setattr(config, "GITHUB_CLIENT_SECRET", "client-secret")


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


@pytest.fixture
def fake_github(github_configured, monkeypatch):
    monkeypatch.setattr(
        oauth_github.requests, "post",
        lambda url, **kwargs: FakeResponse({"access_token": "gho_x", "token_type": "bearer", "scope": "read:user"}),
    )

    def fake_get(url, **kwargs):
        if url.endswith("/user/emails"):
            return FakeResponse([
                {"email": "other@example.com", "primary": False, "verified": True},
                {"email": "main@example.com", "primary": True, "verified": True},
            ])
        return FakeResponse({"id": 4242, "login": "octocat", "name": None, "email": None, "avatar_url": "http://a"})

    monkeypatch.setattr(oauth_github.requests, "get", fake_get)


def test_github_auth_url(client, github_configured):
    response = client.get("/auth/oauth/github")
    data = response.json()["data"]
    query = parse_qs(urlparse(data["authUrl"]).query)
    assert query["client_id"] == ["client-id"]
    assert query["state"] == [data["state"]]
    assert response.cookies.get("oauth_state") == data["state"]
    assert "httponly" in response.headers["set-cookie"].lower()
    assert oauth_github.github_oauth.validate_state(data["state"], data["state"])


def test_github_auth_url_unconfigured(client, monkeypatch):
    monkeypatch.setattr(config, "GITHUB_CLIENT_ID", None)
    assert client.get("/auth/oauth/github").status_code == 500


def test_github_callback_rejects_bad_state(client, github_configured):
    response = client.get("/auth/oauth/github/callback", params={"code": "abc", "state": "forged"})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid state parameter"


def test_session_token_is_not_a_valid_state(github_configured):
    token = issue_session_token(1)
    assert not oauth_github.github_oauth.validate_state(token, token)


def test_state_must_match_the_browser_cookie(github_configured):
    handler = oauth_github.GitHubOAuthHandler()
    mine = handler.generate_auth_url()["state"]
    theirs = handler.generate_auth_url()["state"]
    assert not handler.validate_state(theirs, mine)
    assert not handler.validate_state(mine, None)


def test_github_callback_uses_state_cookie(client, fake_github):
    state = client.get("/auth/oauth/github").json()["data"]["state"]

    # A state issued to somebody else's browser is refused
    other_state = oauth_github.GitHubOAuthHandler().generate_auth_url()["state"]
    response = client.get("/auth/oauth/github/callback", params={"code": "c", "state": other_state})
    assert response.status_code == 400

    response = client.get("/auth/oauth/github/callback", params={"code": "c", "state": state})
    assert response.status_code == 200, response.text
    assert response.json()["data"]["user"]["email"] == "main@example.com"

    # The cookie was cleared, so the same state cannot be replayed
    replay = client.get("/auth/oauth/github/callback", params={"code": "c", "state": state})
    assert replay.status_code == 400


def test_github_callback_signs_in_and_conflicts(client, make_user, github_configured, monkeypatch):
    existing = make_user(email="gh@example.com")
    identities = iter([
        OAuthIdentity(provider="github", provider_account_id="77", email="gh@example.com"),
        OAuthIdentity(provider="github", provider_account_id="77", email="gh@example.com"),
        OAuthIdentity(provider="github", provider_account_id="88", email="gh@example.com"),
    ])
    monkeypatch.setattr(
        oauth_github.github_oauth, "handle_oauth_callback", lambda code, state, expected_state: next(identities)
    )

    for _ in range(2):
        response = client.get("/auth/oauth/github/callback", params={"code": "c", "state": "s"})
        assert response.status_code == 200
        assert response.json()["data"]["user"]["id"] == existing.id

    response = client.get("/auth/oauth/github/callback", params={"code": "c", "state": "s"})
    assert response.status_code == 409


def test_github_provider_failure(client, github_configured, monkeypatch):
    def failing(code, state, expected_state):
        raise ProviderError()

    monkeypatch.setattr(oauth_github.github_oauth, "handle_oauth_callback", failing)
    response = client.get("/auth/oauth/github/callback", params={"code": "c", "state": "s"})
    assert response.status_code == 502


def test_github_handler_builds_identity(fake_github):
    handler = oauth_github.GitHubOAuthHandler()
    state = handler.generate_auth_url()["state"]

    identity = handler.handle_oauth_callback("code", state, state)
    assert identity.provider_account_id == "4242"
    assert identity.email == "main@example.com"
    assert identity.name == "octocat"
    assert identity.access_token == "gho_x"
