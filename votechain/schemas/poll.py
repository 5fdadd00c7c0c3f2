from datetime import timezone

from marshmallow import Schema, fields, validate, validates_schema, ValidationError, EXCLUDE

from ..utils.validation import parse_iso


def not_blank(value: str):
    if not value or not value.strip():
        raise ValidationError("Field cannot be blank.")


class DeadlineField(fields.Field):
    """ISO-8601 deadline, normalized to naive UTC."""

    default_error_messages = {
        "invalid": "Please provide a valid deadline",
        "required": "Please provide a deadline",
    }

    def _deserialize(self, value, attr, data, **kwargs):
        if not isinstance(value, str):
            raise self.make_error("invalid")
        try:
            return parse_iso(value)
        except ValueError:
            raise self.make_error("invalid")


class OptionCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    text = fields.Str(required=True, validate=[validate.Length(max=200), not_blank],
                      error_messages={"required": "Option text is required"})


class PollCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.Str(required=True, validate=[validate.Length(max=200, error="Title cannot exceed 200 characters"), not_blank],
                       error_messages={"required": "Please provide a poll title"})
    description = fields.Str(required=True, validate=not_blank,
                             error_messages={"required": "Please provide a poll description"})
    options = fields.List(
        fields.Nested(OptionCreateSchema),
        required=True,
        validate=validate.Length(min=2, error="Please provide at least two options"),
        error_messages={"required": "Please provide at least two options"},
    )
    deadline = DeadlineField(required=True)


class PollUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.Str(required=False, validate=[validate.Length(max=200, error="Title cannot exceed 200 characters"), not_blank])
    description = fields.Str(required=False, validate=not_blank)
    options = fields.List(
        fields.Nested(OptionCreateSchema),
        required=False,
        validate=validate.Length(min=2, error="Please provide at least two options"),
    )
    deadline = DeadlineField(required=False)

    @validates_schema
    def at_least_one_field(self, data, **kwargs):
        if not data:
            raise ValidationError("At least one field must be provided")


class UTCDateTime(fields.DateTime):
    """Stored datetimes are naive UTC; emit them with an explicit offset."""

    def _serialize(self, value, attr, obj, **kwargs):
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc).isoformat()


class OptionReadSchema(Schema):
    index = fields.Int(attribute="position")
    text = fields.Str()


class PollReadSchema(Schema):
    legacy_id = fields.UUID(attribute="id", data_key="_id", dump_only=True)
    id = fields.UUID()
    title = fields.Str()
    description = fields.Str()
    createdBy = fields.Str(attribute="created_by")
    deadline = UTCDateTime()
    isActive = fields.Bool(attribute="is_active")
    createdAt = UTCDateTime(attribute="created_at")
    updatedAt = UTCDateTime(attribute="updated_at")
    options = fields.List(fields.Nested(OptionReadSchema))
