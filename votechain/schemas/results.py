from marshmallow import Schema, fields

from .poll import PollReadSchema
from ..services.tally import percentage


class OptionResultSchema(Schema):
    index = fields.Int(required=True)
    text = fields.Str(required=True)
    votes = fields.Int(required=True)
    percentage = fields.Int(required=True)


class VotesPerOptionSchema(Schema):
    index = fields.Int(required=True)
    text = fields.Str(required=True)
    votes = fields.Int(required=True)


poll_read_schema = PollReadSchema()
option_result_schema = OptionResultSchema(many=True)
votes_per_option_schema = VotesPerOptionSchema(many=True)


def dump_poll_with_tally(poll, tally) -> dict:
    """Poll JSON annotated with totalVotes, per-option counts and percentages."""
    data = poll_read_schema.dump(poll)
    rows = [
        {
            "index": opt.position,
            "text": opt.text,
            "votes": tally.per_option[opt.position],
            "percentage": percentage(tally.per_option[opt.position], tally.total),
        }
        for opt in poll.options
    ]
    data["options"] = option_result_schema.dump(rows)
    data["votesPerOption"] = votes_per_option_schema.dump(rows)
    data["totalVotes"] = tally.total
    return data
