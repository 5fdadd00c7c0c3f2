import uuid
from datetime import datetime
from ..extensions import db
from ..utils.clock import utcnow

class Poll(db.Model):
    __tablename__ = "polls"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)

    created_by = db.Column(db.String(64), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)

    deadline = db.Column(db.DateTime, nullable=False, index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # relationship
    options = db.relationship(
        "Option",
        backref="poll",
        lazy=True,
        order_by="Option.position",
        cascade="all, delete-orphan"
    )

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utcnow()) > self.deadline

    def is_open(self, now: datetime | None = None) -> bool:
        return self.is_active and not self.is_expired(now)

    def option_text(self, index: int) -> str | None:
        if 0 <= index < len(self.options):
            return self.options[index].text
        return None
