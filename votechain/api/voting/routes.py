from flask import Blueprint, request, g
from flasgger import swag_from

from ...schemas.vote import VoteSubmitSchema, VoteReadSchema, VoteHistorySchema
from ...services import ledger
from ...utils.access import admin_required, wallet_required
from ...utils.validation import validate_or_raise

voting_bp = Blueprint("voting", __name__)

vote_submit_schema = VoteSubmitSchema()
vote_read_schema = VoteReadSchema()
vote_read_many_schema = VoteReadSchema(many=True)
vote_history_schema = VoteHistorySchema(many=True)


@voting_bp.post("/", strict_slashes=False)
@wallet_required
@swag_from({
    "tags": ["Voting"],
    "security": [{"BearerAuth": []}],
    "summary": "Cast a vote",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {
                "pollId": {"type": "string", "example": "uuid"},
                "optionIndex": {"type": "integer", "example": 0},
            },
            "required": ["pollId", "optionIndex"],
        },
    }],
    "responses": {
        201: {"description": "Vote recorded"},
        400: {"description": "Validation error, poll closed/expired, or already voted"},
        401: {"description": "Wallet not authenticated"},
        404: {"description": "Poll not found"},
    },
})
def cast_vote():
    payload = validate_or_raise(vote_submit_schema, request.get_json(silent=True) or {})
    vote = ledger.cast_vote(payload["pollId"], g.wallet_address, payload["optionIndex"])
    return {"success": True, "data": vote_read_schema.dump(vote)}, 201


@voting_bp.get("/history")
@wallet_required
@swag_from({
    "tags": ["Voting"],
    "security": [{"BearerAuth": []}],
    "summary": "Voting history of the calling wallet",
    "description": "Votes on polls that have since been deleted are not listed.",
    "responses": {200: {"description": "OK"}, 401: {"description": "Unauthorized"}},
})
def vote_history():
    history = ledger.vote_history(g.wallet_address)
    return {"success": True, "count": len(history), "data": vote_history_schema.dump(history)}, 200


@voting_bp.get("/poll/<poll_id>")
@admin_required
@swag_from({
    "tags": ["Voting"],
    "security": [{"BearerAuth": []}],
    "summary": "All votes of a poll (poll owner only)",
    "responses": {200: {"description": "OK"}, 403: {"description": "Forbidden"}, 404: {"description": "Poll not found"}},
})
def poll_votes(poll_id):
    votes = ledger.list_votes_for_poll(poll_id, g.wallet_address)
    return {"success": True, "count": len(votes), "data": vote_read_many_schema.dump(votes)}, 200
