"""
Wallet sign-in: nonce challenges and signature verification.

A client fetches a nonce, signs the challenge message with its wallet and
posts the detached signature back. A nonce is accepted once, before it
expires; a successful verification returns a JWT bound to the wallet address.
"""
import logging
from datetime import timedelta

from flask import current_app
from flask_jwt_extended import create_access_token
from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError

from ..errors import AuthenticationError, ValidationError
from ..extensions import db
from ..models.nonce_challenge import NonceChallenge
from ..utils.access import get_policy
from ..utils.audit import audit_log, safe_audit
from ..utils.clock import utcnow
from ..utils.nonce import generate_nonce, challenge_message, extract_nonce
from ..utils.signature import verify_detached

logger = logging.getLogger(__name__)

INVALID_NONCE = "Invalid or expired nonce"
INVALID_SIGNATURE = "Invalid wallet signature"

_NONCE_ATTEMPTS = 3


def purge_expired_nonces() -> int:
    """Delete challenges past their expiry, used or not. Caller commits."""
    result = db.session.execute(
        delete(NonceChallenge)
        .where(NonceChallenge.expires_at <= utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


def issue_nonce() -> NonceChallenge:
    ttl = timedelta(seconds=current_app.config["NONCE_TTL_SECONDS"])
    length = current_app.config["NONCE_LENGTH"]

    purge_expired_nonces()

    for _ in range(_NONCE_ATTEMPTS):
        challenge = NonceChallenge(nonce=generate_nonce(length), expires_at=utcnow() + ttl)
        db.session.add(challenge)
        try:
            db.session.commit()
            return challenge
        except IntegrityError:
            # nonce collision, draw again
            db.session.rollback()

    raise RuntimeError("Could not allocate a unique nonce")


def build_challenge_message(nonce: str) -> str:
    return challenge_message(nonce)


def _consume_nonce(nonce: str) -> bool:
    """Mark the nonce used. Only one caller can win for a given nonce."""
    now = utcnow()
    result = db.session.execute(
        update(NonceChallenge)
        .where(
            NonceChallenge.nonce == nonce,
            NonceChallenge.used_at.is_(None),
            NonceChallenge.expires_at > now,
        )
        .values(used_at=now)
    )
    return result.rowcount == 1


def verify(wallet_address, signature, message) -> dict:
    if not wallet_address or not signature or not message:
        raise ValidationError("Please provide wallet address, signature, and message")

    wallet_address = wallet_address.strip()

    nonce = extract_nonce(message)
    if nonce is None:
        safe_audit("AUTH_FAILED", "AUTH", details={"reason": "no_nonce"}, actor_wallet=wallet_address)
        raise AuthenticationError(INVALID_NONCE)

    # Check the signature before burning the nonce so a forged request
    # cannot consume a legitimate client's challenge.
    if not verify_detached(wallet_address, message, signature):
        logger.warning("Signature verification failed for wallet %s", wallet_address)
        safe_audit("AUTH_FAILED", "AUTH", details={"reason": "bad_signature"}, actor_wallet=wallet_address)
        raise AuthenticationError(INVALID_SIGNATURE)

    if not _consume_nonce(nonce):
        db.session.rollback()
        logger.info("Rejected unknown, used or expired nonce for wallet %s", wallet_address)
        safe_audit("AUTH_FAILED", "AUTH", details={"reason": "nonce_rejected"}, actor_wallet=wallet_address)
        raise AuthenticationError(INVALID_NONCE)

    is_admin = get_policy().is_admin(wallet_address)
    token = create_access_token(
        identity=wallet_address,
        additional_claims={"walletAddress": wallet_address, "isAdmin": is_admin},
    )

    audit_log(
        action="WALLET_AUTHENTICATED",
        entity_type="AUTH",
        details={"is_admin": is_admin},
        actor_wallet=wallet_address,
    )
    db.session.commit()

    return {"token": token, "walletAddress": wallet_address, "isAdmin": is_admin}


def check_admin(wallet_address) -> bool:
    if not wallet_address:
        raise ValidationError("Please provide a wallet address")
    return get_policy().is_admin(wallet_address.strip())
