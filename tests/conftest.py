"""
Test configuration and fixtures for the VoteChain API tests.
"""
from datetime import datetime, timedelta, timezone

import base58
import pytest
from nacl.signing import SigningKey

from votechain import create_app
from votechain.config import TestConfig
from votechain.extensions import db


class Wallet:
    """A browser-wallet stand-in: ed25519 key pair with a base58 address."""

    def __init__(self):
        self.signing_key = SigningKey.generate()
        self.address = base58.b58encode(bytes(self.signing_key.verify_key)).decode()

    def sign(self, message: str) -> list[int]:
        # Wallets hand back a Uint8Array; the client posts Array.from(signature)
        return list(self.signing_key.sign(message.encode("utf-8")).signature)


def iso_in(**delta) -> str:
    return (datetime.now(timezone.utc) + timedelta(**delta)).isoformat()


@pytest.fixture
def admin_wallet():
    return Wallet()


@pytest.fixture
def other_admin_wallet():
    return Wallet()


@pytest.fixture
def voter_wallet():
    return Wallet()


@pytest.fixture
def app(admin_wallet, other_admin_wallet):
    app = create_app(TestConfig)
    app.config["ADMIN_WALLET_ADDRESSES"] = f"{admin_wallet.address}, {other_admin_wallet.address}"
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, wallet: Wallet) -> str:
    nonce_resp = client.get("/api/auth/nonce")
    message = nonce_resp.get_json()["message"]
    resp = client.post("/api/auth/verify", json={
        "walletAddress": wallet.address,
        "signature": wallet.sign(message),
        "message": message,
    })
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["token"]


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def login_as(client):
    def _login_as(wallet: Wallet) -> dict:
        return bearer(login(client, wallet))
    return _login_as


@pytest.fixture
def admin_headers(client, admin_wallet):
    return bearer(login(client, admin_wallet))


@pytest.fixture
def other_admin_headers(client, other_admin_wallet):
    return bearer(login(client, other_admin_wallet))


@pytest.fixture
def voter_headers(client, voter_wallet):
    return bearer(login(client, voter_wallet))


@pytest.fixture
def make_poll(client, admin_headers):
    """Create a poll through the API as the admin wallet; returns its JSON."""
    def _make_poll(options=("A", "B"), deadline=None, headers=None, **fields):
        body = {
            "title": fields.pop("title", "Favourite letter"),
            "description": fields.pop("description", "Pick one"),
            "options": [{"text": text} for text in options],
            "deadline": deadline or iso_in(hours=1),
        }
        body.update(fields)
        resp = client.post("/api/polls", json=body, headers=headers or admin_headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]
    return _make_poll


@pytest.fixture
def cast(client):
    def _cast(headers, poll_id, option_index):
        return client.post("/api/votes", json={"pollId": poll_id, "optionIndex": option_index}, headers=headers)
    return _cast


@pytest.fixture
def wallet_factory():
    return Wallet
