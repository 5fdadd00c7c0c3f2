import uuid
from ..extensions import db
from ..utils.clock import utcnow

class Vote(db.Model):
    __tablename__ = "votes"

    UNIQUE_CONSTRAINT = "uq_votes_poll_wallet"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)

    poll_id = db.Column(db.Uuid, db.ForeignKey("polls.id", ondelete="CASCADE"), nullable=False, index=True)
    option_index = db.Column(db.Integer, nullable=False)
    voter_wallet = db.Column(db.String(64), nullable=False, index=True)

    # Placeholder for an on-chain transaction reference
    tx_hash = db.Column(db.String(64), nullable=False)

    timestamp = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    __table_args__ = (
        # One vote per wallet per poll. This constraint, not the pre-check in
        # the ledger, is what guarantees uniqueness under concurrent casts.
        db.UniqueConstraint("poll_id", "voter_wallet", name=UNIQUE_CONSTRAINT),
    )
