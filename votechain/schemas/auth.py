from marshmallow import Schema, fields, validate, EXCLUDE

from ..utils.nonce import MAX_CHALLENGE_LENGTH


class SignatureField(fields.Field):
    """
    Detached signature as sent by browser wallets: a list of byte values,
    or an encoded string (base58 / base64). Decoding happens in the verifier.
    """

    default_error_messages = {"invalid": "Signature must be a byte array or an encoded string"}

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, str):
            return value
        if isinstance(value, list) and all(
            isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in value
        ):
            return bytes(value)
        raise self.make_error("invalid")


class VerifySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    walletAddress = fields.Str(load_default=None)
    signature = SignatureField(load_default=None)
    message = fields.Str(
        load_default=None,
        validate=validate.Length(max=MAX_CHALLENGE_LENGTH, error="Message is too long"),
    )


class CheckAdminSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    walletAddress = fields.Str(load_default=None)
