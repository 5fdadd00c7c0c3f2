"""
Tests for casting votes, vote listings and voting history.
"""
import re
from datetime import datetime, timedelta, timezone

import pytest

from votechain.errors import DuplicateVoteError
from votechain.extensions import db
from votechain.models.polls import Poll
from votechain.models.vote import Vote
from votechain.services import ledger
from votechain.services import polls as poll_store

TX_HASH = re.compile(r"^[0-9a-f]{64}$")


def past(**delta):
    return (datetime.now(timezone.utc) - timedelta(**delta)).isoformat()


class TestCastVote:

    def test_vote_scenario(self, client, login_as, wallet_factory, make_poll, cast):
        poll = make_poll(options=("A", "B"))
        w1 = login_as(wallet_factory())
        w2 = login_as(wallet_factory())

        first = cast(w1, poll["id"], 0)
        assert first.status_code == 201
        vote = first.get_json()["data"]
        assert TX_HASH.match(vote["txHash"])
        assert vote["pollId"] == poll["id"]
        assert vote["optionIndex"] == 0

        again = cast(w1, poll["id"], 1)
        assert again.status_code == 400
        assert again.get_json()["message"] == "You have already voted in this poll"
        assert again.get_json()["error"]["code"] == "DUPLICATE_VOTE"

        out_of_range = cast(w2, poll["id"], 5)
        assert out_of_range.status_code == 400
        assert out_of_range.get_json()["error"]["code"] == "VALIDATION_ERROR"
        assert out_of_range.get_json()["message"] == "Invalid option index: 5"

    def test_requires_token(self, client, make_poll):
        poll = make_poll()
        resp = client.post("/api/votes", json={"pollId": poll["id"], "optionIndex": 0})
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Not authorized to access this route"

    @pytest.mark.parametrize("body", [{}, {"pollId": "x"}, {"optionIndex": 0}])
    def test_missing_fields(self, client, voter_headers, body):
        resp = client.post("/api/votes", json=body, headers=voter_headers)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Please provide pollId and optionIndex"

    @pytest.mark.parametrize("option_index", [-1, "0", 1.5, True])
    def test_bad_option_index(self, voter_headers, make_poll, cast, option_index):
        poll = make_poll()
        resp = cast(voter_headers, poll["id"], option_index)
        assert resp.status_code == 400

    def test_unknown_poll(self, voter_headers, cast):
        resp = cast(voter_headers, "0b8f5c2e-9d53-4b35-9a39-0f5a7a6f2b11", 0)
        assert resp.status_code == 404

    def test_expired_poll_rejected_and_flipped(self, app, voter_headers, make_poll, cast):
        poll = make_poll(deadline=past(minutes=1))
        resp = cast(voter_headers, poll["id"], 0)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "This poll has expired"
        assert resp.get_json()["error"]["code"] == "VOTING_CLOSED"

        with app.app_context():
            assert db.session.get(Poll, poll_store._parse_id(poll["id"])).is_active is False
            assert Vote.query.count() == 0

    def test_closed_poll_scenario(self, client, admin_headers, other_admin_headers, voter_headers, make_poll, cast):
        poll = make_poll()

        denied = client.put(f"/api/polls/{poll['id']}/close", headers=other_admin_headers)
        assert denied.status_code == 403

        closed = client.put(f"/api/polls/{poll['id']}/close", headers=admin_headers)
        assert closed.get_json()["data"]["isActive"] is False

        resp = cast(voter_headers, poll["id"], 0)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "This poll is no longer active"
        assert resp.get_json()["error"]["code"] == "VOTING_CLOSED"


class TestUniqueness:

    def test_constraint_alone_admits_one_vote(self, app, admin_wallet, make_poll, monkeypatch):
        """With the pre-check disabled, the unique constraint still admits exactly one of 50 casts."""
        poll = make_poll()
        monkeypatch.setattr(ledger, "has_voted", lambda poll_id, voter_wallet: False)

        successes, duplicates = 0, 0
        with app.app_context():
            for _ in range(50):
                try:
                    ledger.cast_vote(poll["id"], "RaceWallet1111111111111111111111111111111111", 0)
                    successes += 1
                except DuplicateVoteError:
                    duplicates += 1

            assert (successes, duplicates) == (1, 49)
            assert Vote.query.filter_by(voter_wallet="RaceWallet1111111111111111111111111111111111").count() == 1

    def test_fifty_attempts_through_api(self, app, voter_headers, make_poll, cast):
        poll = make_poll()
        statuses = [cast(voter_headers, poll["id"], i % 2).status_code for i in range(50)]
        assert statuses.count(201) == 1
        assert statuses.count(400) == 49

        with app.app_context():
            assert Vote.query.count() == 1


class TestPollVotes:

    def test_owner_sees_votes(self, client, admin_headers, voter_headers, voter_wallet, make_poll, cast):
        poll = make_poll()
        cast(voter_headers, poll["id"], 1)

        resp = client.get(f"/api/votes/poll/{poll['id']}", headers=admin_headers)
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["count"] == 1
        assert data["data"][0]["voterWallet"] == voter_wallet.address
        assert data["data"][0]["optionIndex"] == 1

    def test_non_owner_forbidden(self, client, other_admin_headers, make_poll):
        poll = make_poll()
        resp = client.get(f"/api/votes/poll/{poll['id']}", headers=other_admin_headers)
        assert resp.status_code == 403


class TestHistory:

    def test_history_newest_first_with_snapshot(self, client, voter_headers, make_poll, cast):
        first = make_poll(title="First", options=("Red", "Blue"))
        second = make_poll(title="Second", options=("Up", "Down"))
        cast(voter_headers, first["id"], 1)
        cast(voter_headers, second["id"], 0)

        data = client.get("/api/votes/history", headers=voter_headers).get_json()
        assert data["count"] == 2
        assert [v["poll"]["title"] for v in data["data"]] == ["Second", "First"]
        assert data["data"][0]["poll"]["selectedOption"] == "Up"
        assert data["data"][1]["poll"]["selectedOption"] == "Blue"
        assert data["data"][1]["poll"]["_id"] == first["id"]

    def test_snapshot_reflects_current_poll_state(self, client, admin_headers, voter_headers, make_poll, cast):
        poll = make_poll(title="Before")
        cast(voter_headers, poll["id"], 0)
        client.put(f"/api/polls/{poll['id']}", json={"title": "After"}, headers=admin_headers)
        client.put(f"/api/polls/{poll['id']}/close", headers=admin_headers)

        entry = client.get("/api/votes/history", headers=voter_headers).get_json()["data"][0]
        assert entry["poll"]["title"] == "After"
        assert entry["poll"]["isActive"] is False

    def test_deleted_poll_omitted(self, app, client, admin_headers, voter_headers, make_poll, cast):
        kept = make_poll(title="Kept")
        doomed = make_poll(title="Doomed")
        cast(voter_headers, kept["id"], 0)
        cast(voter_headers, doomed["id"], 1)

        assert client.delete(f"/api/polls/{doomed['id']}", headers=admin_headers).status_code == 200

        data = client.get("/api/votes/history", headers=voter_headers).get_json()
        assert data["success"] is True
        assert data["count"] == 1
        assert data["data"][0]["poll"]["title"] == "Kept"

        with app.app_context():
            assert Vote.query.filter_by(poll_id=poll_store._parse_id(doomed["id"])).count() == 0

    def test_expired_poll_flag_persisted_when_history_is_read(self, app, client, voter_headers, make_poll, cast):
        poll = make_poll(title="Short lived")
        cast(voter_headers, poll["id"], 0)
        poll_id = poll_store._parse_id(poll["id"])

        with app.app_context():
            stored = db.session.get(Poll, poll_id)
            stored.deadline = stored.created_at - timedelta(seconds=1)
            db.session.commit()

        entry = client.get("/api/votes/history", headers=voter_headers).get_json()["data"][0]
        assert entry["poll"]["isActive"] is False

        with app.app_context():
            assert db.session.get(Poll, poll_id).is_active is False


def test_cast_accepts_trailing_slash(client, voter_headers, make_poll):
    poll = make_poll()
    resp = client.post("/api/votes/", json={"pollId": poll["id"], "optionIndex": 1}, headers=voter_headers)
    assert resp.status_code == 201
    assert resp.get_json()["data"]["optionIndex"] == 1


def test_vote_json_carries_id_alias(client, voter_headers, make_poll, cast):
    poll = make_poll()
    data = cast(voter_headers, poll["id"], 0).get_json()["data"]
    assert data["_id"] == data["id"]
    assert data["pollId"] == poll["id"]
