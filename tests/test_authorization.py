from concurrent.futures import ThreadPoolExecutor
from urllib.parse import parse_qs, urlsplit

import pytest

from credential_server.oauth.authorization import AuthorizationCodeIssuer, add_query_params
from credential_server.oauth.errors import OAuthError
from credential_server.oauth.pkce import generate_pkce_pair
from credential_server.oauth.schemas.authorize import AuthorizationRequest

from conftest import REDIRECT_URI

UNKNOWN_CLIENT = "00000000-0000-4000-8000-000000000000"


@pytest.fixture
def issuer(registry):
    return AuthorizationCodeIssuer(registry, clock=lambda: 1234.5)


def auth_request(client_id, redirect_uri=REDIRECT_URI, **extra) -> AuthorizationRequest:
    _, challenge = generate_pkce_pair()
    params = {
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "code_challenge": challenge,
        "code_challenge_method": "S256",
    }
    params.update(extra)
    return AuthorizationRequest(**params)


def query(url: str) -> dict:
    return {k: v[0] for k, v in parse_qs(urlsplit(url).query).items()}


def test_issues_code_and_records_pending_authorization(issuer, registry, registered_client):
    request = auth_request(registered_client.client_id, state="xyz", scope="quotes")
    url = issuer.authorize(request)

    assert url.startswith(REDIRECT_URI + "?")
    params = query(url)
    assert params["state"] == "xyz"

    pending = registry.get_client(registered_client.client_id).pending
    assert pending.code == params["code"]
    assert pending.code_challenge == request.code_challenge
    assert pending.code_creation_date == 1234.5
    assert pending.scope == "quotes"


def test_scope_defaults_to_all_and_state_is_optional(issuer, registry, registered_client):
    url = issuer.authorize(auth_request(registered_client.client_id))

    assert "state" not in query(url)
    assert registry.get_client(registered_client.client_id).pending.scope == "all"


def test_unknown_client(issuer):
    with pytest.raises(OAuthError) as exc_info:
        issuer.authorize(auth_request(UNKNOWN_CLIENT))
    assert exc_info.value.error == "invalid_client"


@pytest.mark.parametrize("redirect_uri", [
    "https://app.example/cb/",
    "https://app.example/cb/extra",
    "https://app.example/c",
    "https://app.example/cb?next=1",
    "http://app.example/cb",
    "https://app.example.evil.com/cb",
])
def test_redirect_uri_must_match_exactly(issuer, registry, registered_client, redirect_uri):
    with pytest.raises(OAuthError) as exc_info:
        issuer.authorize(auth_request(registered_client.client_id, redirect_uri=redirect_uri))

    assert exc_info.value.error == "invalid_request"
    assert registry.get_client(registered_client.client_id).pending is None


def test_client_without_redirect_uris(issuer, store, registered_client):
    record = store.get_client_by_id(registered_client.client_id)
    record.redirect_uris = []
    store.set_client(record.client_id, record)

    with pytest.raises(OAuthError) as exc_info:
        issuer.authorize(auth_request(registered_client.client_id))
    assert exc_info.value.error == "invalid_request"
    assert exc_info.value.description == "No redirect URIs registered for this client"


def test_second_authorization_replaces_first(issuer, registry, registered_client):
    first = query(issuer.authorize(auth_request(registered_client.client_id)))["code"]
    second = query(issuer.authorize(auth_request(registered_client.client_id)))["code"]

    assert first != second
    assert registry.get_client(registered_client.client_id).pending.code == second
    assert registry.get_client_by_code(first).pending.code == second


def test_concurrent_authorizations_leave_one_consistent_winner(registry, registered_client):
    """Racing writers never leave a pending authorization mixing two requests"""
    issuer = AuthorizationCodeIssuer(registry)
    requests = [auth_request(registered_client.client_id) for _ in range(32)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        urls = list(pool.map(issuer.authorize, requests))

    pending = registry.get_client(registered_client.client_id).pending
    by_code = {query(url)["code"]: request for url, request in zip(urls, requests)}
    assert pending.code in by_code
    assert pending.code_challenge == by_code[pending.code].code_challenge


def test_add_query_params_keeps_existing_query():
    url = add_query_params("https://app.example/cb?tenant=a&code=old", code="new", state="s")
    assert query(url) == {"tenant": "a", "code": "new", "state": "s"}
