import logging
from functools import wraps
from typing import Callable

from flask import current_app, g
from flask_jwt_extended import verify_jwt_in_request, get_jwt
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from ..errors import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)

NOT_AUTHORIZED = "Not authorized to access this route"
ADMIN_REQUIRED = "Admin privileges required to access this route"


def parse_wallet_list(raw: str | None) -> frozenset[str]:
    return frozenset(part.strip() for part in (raw or "").split(",") if part.strip())


class AccessPolicy:
    """
    Resolves the calling wallet from the bearer token and decides admin
    membership. The admin set is pulled from admin_source on every check,
    so revoking an address takes effect without waiting for token expiry.
    """

    def __init__(self, admin_source: Callable[[], str | None]):
        self._admin_source = admin_source

    def admin_wallets(self) -> frozenset[str]:
        return parse_wallet_list(self._admin_source())

    def is_admin(self, wallet_address: str | None) -> bool:
        return bool(wallet_address) and wallet_address in self.admin_wallets()

    def authenticate(self) -> str:
        try:
            verify_jwt_in_request()
        except (JWTExtendedException, PyJWTError) as e:
            logger.info("Token rejected: %s", e)
            raise AuthenticationError(NOT_AUTHORIZED)

        wallet = (get_jwt() or {}).get("walletAddress")
        if not wallet:
            logger.info("Token does not contain walletAddress")
            raise AuthenticationError("Invalid token payload")
        return wallet

    def optional_wallet(self) -> str | None:
        """Wallet of the caller if a valid token is present, else None."""
        try:
            verify_jwt_in_request(optional=True)
            return (get_jwt() or {}).get("walletAddress") or None
        except (JWTExtendedException, PyJWTError) as e:
            logger.debug("Optional JWT check failed: %s", e)
            return None

    def require_admin(self, wallet_address: str) -> None:
        if not self.is_admin(wallet_address):
            raise AuthorizationError(ADMIN_REQUIRED)


def config_admin_source(app) -> Callable[[], str | None]:
    return lambda: app.config.get("ADMIN_WALLET_ADDRESSES")


def get_policy() -> AccessPolicy:
    return current_app.extensions["access_policy"]


def require_owner(poll, wallet_address: str, action: str) -> None:
    if poll.created_by != wallet_address:
        raise AuthorizationError(f"User {wallet_address} is not authorized to {action} this poll")


def wallet_required(fn):
    """Require a valid bearer token; the wallet is exposed as g.wallet_address."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        g.wallet_address = get_policy().authenticate()
        return fn(*args, **kwargs)
    return wrapper


def admin_required(fn):
    """Require a valid bearer token whose wallet is currently in the admin set."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        policy = get_policy()
        g.wallet_address = policy.authenticate()
        policy.require_admin(g.wallet_address)
        return fn(*args, **kwargs)
    return wrapper


def wallet_optional(fn):
    """Resolve the wallet when a valid token is sent; anonymous otherwise."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        g.wallet_address = get_policy().optional_wallet()
        return fn(*args, **kwargs)
    return wrapper
