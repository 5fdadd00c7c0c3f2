import uuid
from ..extensions import db

class Option(db.Model):
    __tablename__ = "poll_options"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    poll_id = db.Column(db.Uuid, db.ForeignKey("polls.id", ondelete="CASCADE"), nullable=False, index=True)

    # Index referenced by votes; contiguous from 0 within a poll
    position = db.Column(db.Integer, nullable=False)
    text = db.Column(db.String(200), nullable=False)

    __table_args__ = (
        db.UniqueConstraint("poll_id", "position", name="uq_poll_options_position"),
    )
