"""
Poll storage and lifecycle.

Expiry is detected lazily: reading or voting on a poll whose deadline has
passed flips is_active to False at that moment instead of relying on a
background sweep. The flip is a conditional update, so it is persisted once
no matter how many requests observe the expired poll.
"""
import logging
import uuid

from flask import current_app
from sqlalchemy import and_, not_, or_, update

from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..models.option import Option
from ..models.polls import Poll
from ..models.vote import Vote
from ..utils.access import require_owner
from ..utils.audit import audit_log
from ..utils.clock import utcnow

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "deadline", "options")


def _parse_id(poll_id) -> uuid.UUID | None:
    if isinstance(poll_id, uuid.UUID):
        return poll_id
    try:
        return uuid.UUID(str(poll_id))
    except (TypeError, ValueError):
        return None


def find_poll(poll_id) -> Poll | None:
    pid = _parse_id(poll_id)
    return db.session.get(Poll, pid) if pid else None


def load_poll(poll_id) -> Poll:
    poll = find_poll(poll_id)
    if poll is None:
        raise NotFoundError(f"Poll not found with id of {poll_id}")
    return poll


def expire_if_due(poll: Poll) -> bool:
    """
    Persist is_active=False for an active poll past its deadline.
    Returns True only for the request whose update flipped the flag.
    """
    if not poll.is_active or not poll.is_expired():
        return False

    result = db.session.execute(
        update(Poll)
        .where(Poll.id == poll.id, Poll.is_active.is_(True))
        .values(is_active=False)
        .execution_options(synchronize_session=False)
    )
    flipped = result.rowcount == 1
    if flipped:
        audit_log(
            action="POLL_EXPIRED",
            entity_type="POLL",
            entity_id=str(poll.id),
            details={"deadline": poll.deadline.isoformat()},
        )
        logger.info("Poll %s expired, marked inactive", poll.id)
    db.session.commit()
    db.session.refresh(poll)
    return flipped


def _open_clause(now):
    return and_(Poll.is_active.is_(True), Poll.deadline > now)


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _to_positive_int(value, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def list_polls(is_active: bool | None = None, search: str | None = None, page=None, limit=None):
    """Returns (polls, total, page, limit)."""
    page = _to_positive_int(page, 1)
    limit = min(
        _to_positive_int(limit, current_app.config["POLLS_DEFAULT_PAGE_SIZE"]),
        current_app.config["POLLS_MAX_PAGE_SIZE"],
    )

    now = utcnow()
    query = Poll.query
    if is_active is True:
        query = query.filter(_open_clause(now))
    elif is_active is False:
        query = query.filter(not_(_open_clause(now)))

    if search:
        pattern = f"%{_escape_like(search.strip())}%"
        query = query.filter(or_(
            Poll.title.ilike(pattern, escape="\\"),
            Poll.description.ilike(pattern, escape="\\"),
        ))

    total = query.order_by(None).count()
    polls = (
        query.order_by(Poll.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    for poll in polls:
        expire_if_due(poll)
    return polls, total, page, limit


def list_polls_by_creator(wallet_address: str) -> list[Poll]:
    polls = (
        Poll.query.filter_by(created_by=wallet_address)
        .order_by(Poll.created_at.desc())
        .all()
    )
    for poll in polls:
        expire_if_due(poll)
    return polls


def get_poll(poll_id) -> Poll:
    poll = load_poll(poll_id)
    expire_if_due(poll)
    return poll


def _replace_options(poll: Poll, options: list[dict]) -> None:
    poll.options.clear()
    db.session.flush()
    for position, opt in enumerate(options):
        poll.options.append(Option(position=position, text=opt["text"].strip()))


def create_poll(creator_wallet: str, title: str, description: str, options: list[dict], deadline) -> Poll:
    if not options or len(options) < 2:
        raise ValidationError("Please provide at least two options")
    if not title or not title.strip() or not description or not description.strip():
        raise ValidationError("Please provide a poll title and description")
    if deadline is None:
        raise ValidationError("Please provide a deadline")

    poll = Poll(
        created_by=creator_wallet,
        title=title.strip(),
        description=description.strip(),
        deadline=deadline,
        is_active=True,
    )
    for position, opt in enumerate(options):
        poll.options.append(Option(position=position, text=opt["text"].strip()))

    db.session.add(poll)
    db.session.flush()

    audit_log(
        action="POLL_CREATED",
        entity_type="POLL",
        entity_id=str(poll.id),
        details={"title": poll.title, "options": len(options)},
        actor_wallet=creator_wallet,
    )
    db.session.commit()
    logger.info("Poll %s created by %s", poll.id, creator_wallet)
    return poll


def has_votes(poll: Poll) -> bool:
    return db.session.query(Vote.id).filter(Vote.poll_id == poll.id).first() is not None


def update_poll(poll_id, patch: dict, requesting_wallet: str) -> Poll:
    poll = load_poll(poll_id)
    require_owner(poll, requesting_wallet, "update")

    changes = {k: v for k, v in patch.items() if k in UPDATABLE_FIELDS}
    if not changes:
        raise ValidationError("At least one field must be provided")

    if "options" in changes:
        if len(changes["options"]) < 2:
            raise ValidationError("Please provide at least two options")
        if has_votes(poll):
            raise ConflictError("Cannot update options after votes have been cast")

    if "title" in changes:
        poll.title = changes["title"].strip()
    if "description" in changes:
        poll.description = changes["description"].strip()
    if "deadline" in changes:
        poll.deadline = changes["deadline"]
    if "options" in changes:
        _replace_options(poll, changes["options"])

    audit_log(
        action="POLL_UPDATED",
        entity_type="POLL",
        entity_id=str(poll.id),
        details={"updated_fields": sorted(changes.keys())},
        actor_wallet=requesting_wallet,
    )
    db.session.commit()
    return poll


def close_poll(poll_id, requesting_wallet: str) -> Poll:
    poll = load_poll(poll_id)
    require_owner(poll, requesting_wallet, "close")

    poll.is_active = False
    audit_log(
        action="POLL_CLOSED",
        entity_type="POLL",
        entity_id=str(poll.id),
        actor_wallet=requesting_wallet,
    )
    db.session.commit()
    logger.info("Poll %s closed by %s", poll.id, requesting_wallet)
    return poll


def delete_poll(poll_id, requesting_wallet: str) -> None:
    poll = load_poll(poll_id)
    require_owner(poll, requesting_wallet, "delete")

    # Votes first: SQLite does not enforce ON DELETE CASCADE by default
    deleted_votes = Vote.query.filter_by(poll_id=poll.id).delete(synchronize_session=False)

    audit_log(
        action="POLL_DELETED",
        entity_type="POLL",
        entity_id=str(poll.id),
        details={"title": poll.title, "votes_deleted": deleted_votes},
        actor_wallet=requesting_wallet,
    )
    db.session.delete(poll)
    db.session.commit()
    logger.info("Poll %s deleted by %s (%d votes)", poll.id, requesting_wallet, deleted_votes)
