from ..extensions import db
from ..utils.clock import utcnow

class TokenBlocklist(db.Model):
    """Session tokens revoked before their expiry (wallet disconnect / logout)."""

    __tablename__ = "token_blocklist"

    id = db.Column(db.Integer, primary_key=True)
    jti = db.Column(db.String(64), nullable=False, unique=True, index=True)
    wallet_address = db.Column(db.String(64), nullable=True, index=True)
    revoked_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    @classmethod
    def revoke(cls, jti: str, wallet_address: str | None = None) -> "TokenBlocklist":
        entry = cls(jti=jti, wallet_address=wallet_address)
        db.session.add(entry)
        return entry

    @staticmethod
    def is_revoked(jti: str) -> bool:
        return db.session.query(TokenBlocklist.id).filter_by(jti=jti).scalar() is not None
