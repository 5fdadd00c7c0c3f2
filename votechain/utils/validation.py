from datetime import datetime, timezone

from marshmallow import ValidationError as SchemaValidationError

from ..errors import ValidationError


def _first_message(errors) -> str:
    if isinstance(errors, dict):
        for value in errors.values():
            return _first_message(value)
    if isinstance(errors, (list, tuple)) and errors:
        return _first_message(errors[0])
    return str(errors) if errors else "Validation error"


def validate_or_raise(schema, payload):
    """
    Load payload through a marshmallow schema, converting its errors into our
    ValidationError (message = first field error, details = all of them).
    """
    try:
        return schema.load(payload)
    except SchemaValidationError as e:
        raise ValidationError(_first_message(e.messages), details=e.messages)


def parse_iso(s: str) -> datetime:
    """
    Accepts:
      - 'YYYY-MM-DDTHH:MM:SS'
      - 'YYYY-MM-DDTHH:MM:SS.sssZ'
      - 'YYYY-MM-DDTHH:MM:SS+00:00'
    Returns a naive datetime (UTC if timezone provided).
    """
    s = (s or "").strip()
    if not s:
        raise ValueError("Empty datetime string")

    # Normalize Zulu
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt
