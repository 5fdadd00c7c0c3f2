from marshmallow import Schema, fields, EXCLUDE

from .poll import UTCDateTime


class VoteSubmitSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    pollId = fields.Str(required=True, error_messages={"required": "Please provide pollId and optionIndex"})
    optionIndex = fields.Int(required=True, strict=True,
                             error_messages={
                                 "required": "Please provide pollId and optionIndex",
                                 "invalid": "optionIndex must be an integer",
                             })


class VoteReadSchema(Schema):
    legacy_id = fields.UUID(attribute="id", data_key="_id", dump_only=True)
    id = fields.UUID()
    pollId = fields.UUID(attribute="poll_id")
    optionIndex = fields.Int(attribute="option_index")
    voterWallet = fields.Str(attribute="voter_wallet")
    txHash = fields.Str(attribute="tx_hash")
    timestamp = UTCDateTime()


class PollSnapshotSchema(Schema):
    id = fields.UUID(data_key="_id")
    title = fields.Str()
    isActive = fields.Bool()
    deadline = UTCDateTime()
    selectedOption = fields.Str()


class VoteHistorySchema(VoteReadSchema):
    poll = fields.Nested(PollSnapshotSchema)
