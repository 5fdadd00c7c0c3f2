import base64
import binascii

import base58
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

PUBLIC_KEY_BYTES = 32
SIGNATURE_BYTES = 64


def decode_wallet_address(address: str) -> bytes:
    """Base58 wallet address -> 32-byte ed25519 public key. Raises ValueError."""
    try:
        raw = base58.b58decode(address.strip())
    except ValueError as e:
        raise ValueError("Wallet address is not valid base58") from e
    if len(raw) != PUBLIC_KEY_BYTES:
        raise ValueError("Wallet address must encode a 32-byte public key")
    return raw


def decode_signature(signature) -> bytes:
    """
    Accepts raw bytes (wallets send Array.from(Uint8Array)), a base58 string
    or a base64 string. Raises ValueError if none yields 64 bytes.
    """
    if isinstance(signature, (bytes, bytearray)):
        raw = bytes(signature)
    else:
        raw = None
        text = str(signature).strip()
        try:
            candidate = base58.b58decode(text)
            if len(candidate) == SIGNATURE_BYTES:
                raw = candidate
        except ValueError:
            pass
        if raw is None:
            try:
                raw = base64.b64decode(text, validate=True)
            except (binascii.Error, ValueError) as e:
                raise ValueError("Signature encoding not recognised") from e
    if len(raw) != SIGNATURE_BYTES:
        raise ValueError("Signature must be 64 bytes")
    return raw


def verify_detached(address: str, message: str, signature) -> bool:
    """True if signature is a valid ed25519 signature of message's UTF-8 bytes by address."""
    try:
        public_key = decode_wallet_address(address)
        sig = decode_signature(signature)
        payload = message.encode("utf-8")
    except ValueError:
        # UnicodeEncodeError included: lone surrogates have no UTF-8 bytes
        return False

    try:
        VerifyKey(public_key).verify(payload, sig)
        return True
    except BadSignatureError:
        return False
