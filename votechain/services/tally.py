from dataclasses import dataclass, field

from sqlalchemy import func

from ..extensions import db
from ..models.vote import Vote


@dataclass(frozen=True)
class Tally:
    total: int
    per_option: list[int] = field(default_factory=list)


def percentage(votes: int, total: int) -> int:
    """Share of total as a whole percent, halves rounded up (12.5 -> 13)."""
    if total <= 0:
        return 0
    return (votes * 200 + total) // (total * 2)


def _build(option_count: int, counts: dict[int, int]) -> Tally:
    per_option = [0] * option_count
    for index, count in counts.items():
        # Indices outside the option range cannot be cast, skip them if present
        if 0 <= index < option_count:
            per_option[index] = count
    return Tally(total=sum(per_option), per_option=per_option)


def tally(poll) -> Tally:
    rows = (
        db.session.query(Vote.option_index, func.count(Vote.id))
        .filter(Vote.poll_id == poll.id)
        .group_by(Vote.option_index)
        .all()
    )
    return _build(len(poll.options), {int(index): int(count) for index, count in rows})


def tally_many(polls) -> dict:
    """Tallies for several polls from a single grouped query, keyed by poll id."""
    polls = list(polls)
    if not polls:
        return {}

    rows = (
        db.session.query(Vote.poll_id, Vote.option_index, func.count(Vote.id))
        .filter(Vote.poll_id.in_([p.id for p in polls]))
        .group_by(Vote.poll_id, Vote.option_index)
        .all()
    )

    counts: dict = {p.id: {} for p in polls}
    for poll_id, index, count in rows:
        counts[poll_id][int(index)] = int(count)

    return {p.id: _build(len(p.options), counts[p.id]) for p in polls}
