import math

from flask import Blueprint, request, g
from flasgger import swag_from

from ...schemas.poll import PollCreateSchema, PollUpdateSchema
from ...schemas.results import dump_poll_with_tally
from ...services import polls as poll_store
from ...services import ledger
from ...services.tally import tally, tally_many
from ...utils.access import admin_required, wallet_optional
from ...utils.validation import validate_or_raise

polls_bp = Blueprint("polls", __name__)

poll_create_schema = PollCreateSchema()
poll_update_schema = PollUpdateSchema()


def _parse_active_filter(raw: str | None) -> bool | None:
    if raw == "true":
        return True
    if raw == "false":
        return False
    return None


def _dump_many(polls) -> list[dict]:
    tallies = tally_many(polls)
    return [dump_poll_with_tally(p, tallies[p.id]) for p in polls]


@polls_bp.get("/", strict_slashes=False)
@wallet_optional
@swag_from({
    "tags": ["Polls"],
    "summary": "List polls",
    "parameters": [
        {"in": "query", "name": "isActive", "type": "string", "enum": ["true", "false"]},
        {"in": "query", "name": "search", "type": "string"},
        {"in": "query", "name": "page", "type": "integer"},
        {"in": "query", "name": "limit", "type": "integer"},
    ],
    "responses": {200: {"description": "OK"}},
})
def list_polls():
    polls, total, page, limit = poll_store.list_polls(
        is_active=_parse_active_filter(request.args.get("isActive")),
        search=request.args.get("search"),
        page=request.args.get("page"),
        limit=request.args.get("limit"),
    )

    return {
        "success": True,
        "count": len(polls),
        "total": total,
        "pagination": {
            "page": page,
            "limit": limit,
            "totalPages": math.ceil(total / limit),
        },
        "data": _dump_many(polls),
    }, 200


@polls_bp.get("/admin/mypolls")
@admin_required
@swag_from({
    "tags": ["Polls"],
    "security": [{"BearerAuth": []}],
    "summary": "Polls created by the calling admin wallet",
    "responses": {200: {"description": "OK"}, 401: {"description": "Unauthorized"}, 403: {"description": "Forbidden"}},
})
def my_polls():
    polls = poll_store.list_polls_by_creator(g.wallet_address)
    return {"success": True, "count": len(polls), "data": _dump_many(polls)}, 200


@polls_bp.get("/<poll_id>")
@wallet_optional
@swag_from({"tags": ["Polls"], "summary": "Get poll details with tally", "responses": {200: {}, 404: {}}})
def get_poll(poll_id):
    poll = poll_store.get_poll(poll_id)
    data = dump_poll_with_tally(poll, tally(poll))

    if g.wallet_address:
        data["userVote"] = ledger.user_vote(poll, g.wallet_address)

    return {"success": True, "data": data}, 200


@polls_bp.post("/", strict_slashes=False)
@admin_required
@swag_from({
    "tags": ["Polls"],
    "security": [{"BearerAuth": []}],
    "summary": "Create a poll (admin wallets only)",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {
                "title": {"type": "string"},
                "description": {"type": "string"},
                "options": {"type": "array", "items": {"type": "object", "properties": {"text": {"type": "string"}}}},
                "deadline": {"type": "string", "format": "date-time"},
            },
            "required": ["title", "description", "options", "deadline"],
        },
    }],
    "responses": {201: {"description": "Created"}, 400: {"description": "Validation error"}, 403: {"description": "Forbidden"}}
})
def create_poll():
    payload = validate_or_raise(poll_create_schema, request.get_json(silent=True) or {})

    poll = poll_store.create_poll(
        creator_wallet=g.wallet_address,
        title=payload["title"],
        description=payload["description"],
        options=payload["options"],
        deadline=payload["deadline"],
    )
    return {"success": True, "data": dump_poll_with_tally(poll, tally(poll))}, 201


@polls_bp.put("/<poll_id>")
@admin_required
@swag_from({"tags": ["Polls"], "security": [{"BearerAuth": []}], "summary": "Update poll (owner only)", "responses": {200: {}, 400: {}, 403: {}, 404: {}}})
def update_poll(poll_id):
    payload = validate_or_raise(poll_update_schema, request.get_json(silent=True) or {})
    poll = poll_store.update_poll(poll_id, payload, g.wallet_address)
    return {"success": True, "data": dump_poll_with_tally(poll, tally(poll))}, 200


@polls_bp.put("/<poll_id>/close")
@admin_required
@swag_from({"tags": ["Polls"], "security": [{"BearerAuth": []}], "summary": "Close poll (owner only)", "responses": {200: {}, 403: {}, 404: {}}})
def close_poll(poll_id):
    poll = poll_store.close_poll(poll_id, g.wallet_address)
    return {"success": True, "data": dump_poll_with_tally(poll, tally(poll))}, 200


@polls_bp.delete("/<poll_id>")
@admin_required
@swag_from({"tags": ["Polls"], "security": [{"BearerAuth": []}], "summary": "Delete poll and its votes (owner only)", "responses": {200: {}, 403: {}, 404: {}}})
def delete_poll(poll_id):
    poll_store.delete_poll(poll_id, g.wallet_address)
    return {"success": True, "data": {}}, 200
