import secrets
import string

CHALLENGE_PREFIX = "Sign this message to authenticate with VoteChain: "

# Longest message a client can legitimately send back
MAX_CHALLENGE_LENGTH = 256

_ASCII_DIGITS = frozenset(string.digits)


def generate_nonce(length: int = 16) -> str:
    digits = string.digits
    # Leading zero would be lost by clients that treat the nonce as a number
    return secrets.choice("123456789") + "".join(secrets.choice(digits) for _ in range(length - 1))


def challenge_message(nonce: str) -> str:
    return f"{CHALLENGE_PREFIX}{nonce}"


def extract_nonce(message: str) -> str | None:
    """Nonce from a message that is exactly the challenge we issued, else None."""
    if not message or len(message) > MAX_CHALLENGE_LENGTH or not message.startswith(CHALLENGE_PREFIX):
        return None
    nonce = message[len(CHALLENGE_PREFIX):]
    if not nonce or not set(nonce) <= _ASCII_DIGITS:
        return None
    return nonce
