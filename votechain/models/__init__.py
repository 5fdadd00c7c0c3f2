from .polls import Poll  # noqa: F401
from .option import Option  # noqa: F401
from .vote import Vote  # noqa: F401
from .nonce_challenge import NonceChallenge  # noqa: F401
from .token_blocklist import TokenBlocklist  # noqa: F401
from .audit_log import AuditLog  # noqa: F401

# Import ALL models so SQLAlchemy registers them

__all__ = [
    "Poll",
    "Option",
    "Vote",
    "NonceChallenge",
    "TokenBlocklist",
    "AuditLog",
]
