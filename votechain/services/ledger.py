"""
Vote ledger: one vote per wallet per poll, only while the poll is open.

Uniqueness is enforced by the uq_votes_poll_wallet constraint. The lookup
done before inserting only avoids minting a transaction hash for a vote that
is certain to be rejected; two racing casts can both pass it, and the
constraint then turns the loser's insert into a DuplicateVoteError.
"""
import logging
import secrets

from sqlalchemy.exc import IntegrityError

from ..errors import DuplicateVoteError, ValidationError, VotingClosedError
from ..extensions import db
from ..models.polls import Poll
from ..models.vote import Vote
from ..utils.access import require_owner
from ..utils.audit import audit_log, safe_audit
from . import polls as poll_store

logger = logging.getLogger(__name__)

ALREADY_VOTED = "You have already voted in this poll"
POLL_INACTIVE = "This poll is no longer active"
POLL_EXPIRED = "This poll has expired"
UNKNOWN_OPTION = "Unknown option"


def generate_tx_hash() -> str:
    return secrets.token_hex(32)


def find_vote(poll_id, voter_wallet: str) -> Vote | None:
    return Vote.query.filter_by(poll_id=poll_id, voter_wallet=voter_wallet).first()


def has_voted(poll_id, voter_wallet: str) -> bool:
    return db.session.query(Vote.id).filter_by(poll_id=poll_id, voter_wallet=voter_wallet).first() is not None


def _check_option_index(poll: Poll, option_index) -> int:
    if isinstance(option_index, bool) or not isinstance(option_index, int):
        raise ValidationError(f"Invalid option index: {option_index}")
    if option_index < 0 or option_index >= len(poll.options):
        raise ValidationError(f"Invalid option index: {option_index}")
    return option_index


def cast_vote(poll_id, voter_wallet: str, option_index) -> Vote:
    poll = poll_store.load_poll(poll_id)

    if not poll.is_active:
        raise VotingClosedError(POLL_INACTIVE)

    if poll.is_expired():
        poll_store.expire_if_due(poll)
        raise VotingClosedError(POLL_EXPIRED)

    option_index = _check_option_index(poll, option_index)

    if has_voted(poll.id, voter_wallet):
        raise DuplicateVoteError(ALREADY_VOTED)

    vote = Vote(
        poll_id=poll.id,
        option_index=option_index,
        voter_wallet=voter_wallet,
        tx_hash=generate_tx_hash(),
    )

    try:
        db.session.add(vote)
        db.session.flush()  # ensure vote.id

        audit_log(
            action="VOTE_CAST",
            entity_type="VOTE",
            entity_id=str(vote.id),
            details={"poll_id": str(poll.id), "option_index": option_index},
            actor_wallet=voter_wallet,
        )
        db.session.commit()

    except IntegrityError:
        db.session.rollback()
        if find_vote(poll.id, voter_wallet) is None:
            raise

        logger.info("Duplicate vote attempt poll=%s wallet=%s", poll.id, voter_wallet)
        safe_audit(
            action="VOTE_DUPLICATE_ATTEMPT",
            entity_type="VOTE",
            details={"poll_id": str(poll.id)},
            actor_wallet=voter_wallet,
        )
        raise DuplicateVoteError(ALREADY_VOTED)

    logger.info("Vote recorded poll=%s wallet=%s tx=%s", poll.id, voter_wallet, vote.tx_hash)
    return vote


def list_votes_for_poll(poll_id, requesting_wallet: str) -> list[Vote]:
    poll = poll_store.load_poll(poll_id)
    require_owner(poll, requesting_wallet, "view votes for")
    return Vote.query.filter_by(poll_id=poll.id).order_by(Vote.timestamp.asc()).all()


def user_vote(poll: Poll, wallet_address: str | None) -> int | None:
    if not wallet_address:
        return None
    vote = find_vote(poll.id, wallet_address)
    return vote.option_index if vote else None


def vote_history(voter_wallet: str) -> list[dict]:
    """
    Votes by the wallet, newest first, each with the poll as it is now.
    Votes whose poll no longer exists are left out rather than reported.
    """
    rows = (
        db.session.query(Vote, Poll)
        .outerjoin(Poll, Poll.id == Vote.poll_id)
        .filter(Vote.voter_wallet == voter_wallet)
        .order_by(Vote.timestamp.desc())
        .all()
    )

    history = []
    for vote, poll in rows:
        if poll is None:
            continue
        poll_store.expire_if_due(poll)
        history.append({
            "id": vote.id,
            "poll_id": vote.poll_id,
            "option_index": vote.option_index,
            "voter_wallet": vote.voter_wallet,
            "tx_hash": vote.tx_hash,
            "timestamp": vote.timestamp,
            "poll": {
                "id": poll.id,
                "title": poll.title,
                "isActive": poll.is_active,
                "deadline": poll.deadline,
                "selectedOption": poll.option_text(vote.option_index) or UNKNOWN_OPTION,
            },
        })
    return history
