import uuid
from ..extensions import db
from ..utils.clock import utcnow

class NonceChallenge(db.Model):
    __tablename__ = "nonce_challenges"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    nonce = db.Column(db.String(64), nullable=False, unique=True, index=True)

    expires_at = db.Column(db.DateTime, nullable=False)
    used_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def is_expired(self) -> bool:
        return utcnow() >= self.expires_at

    def is_used(self) -> bool:
        return self.used_at is not None
