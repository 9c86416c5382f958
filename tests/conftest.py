"""Shared test fixtures for envseal."""

from __future__ import annotations

import pytest
from nacl import encoding, public

from envseal.config import EnvsealConfig

from _fakes import REPO, FakeResponse, FakeSession


@pytest.fixture
def recipient() -> public.PrivateKey:
    """Private key standing in for the secret store's."""
    return public.PrivateKey.generate()


@pytest.fixture
def public_key_b64(recipient: public.PrivateKey) -> str:
    return recipient.public_key.encode(encoding.Base64Encoder).decode("ascii")


@pytest.fixture
def config() -> EnvsealConfig:
    """Fast config: no backoff delay, a couple of retries."""
    return EnvsealConfig(api_url="https://api.test", backoff_seconds=0, max_retries=2)


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def repo_store(session: FakeSession, public_key_b64: str) -> FakeSession:
    """A reachable repository exposing its own public key."""
    session.route("GET", f"/repos/{REPO}", FakeResponse(200, {"full_name": REPO}))
    session.route(
        "GET",
        f"/repos/{REPO}/actions/secrets/public-key",
        FakeResponse(200, {"key": public_key_b64, "key_id": "repo-key-1"}),
    )
    return session
