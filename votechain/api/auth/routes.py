from flask import Blueprint, request, g
from flasgger import swag_from
from flask_jwt_extended import get_jwt

from ...extensions import db
from ...models.token_blocklist import TokenBlocklist
from ...schemas.auth import VerifySchema, CheckAdminSchema
from ...services import credentials
from ...utils.access import get_policy, wallet_required
from ...utils.audit import audit_log
from ...utils.validation import validate_or_raise

auth_bp = Blueprint("auth", __name__)

verify_schema = VerifySchema()
check_admin_schema = CheckAdminSchema()


@auth_bp.get("/nonce")
@swag_from({
    "tags": ["Auth"],
    "summary": "Get a sign-in nonce",
    "description": "Returns a single-use nonce and the exact message the wallet must sign.",
    "responses": {200: {"description": "Nonce issued"}},
})
def get_nonce():
    challenge = credentials.issue_nonce()
    return {
        "success": True,
        "nonce": challenge.nonce,
        "message": credentials.build_challenge_message(challenge.nonce),
    }, 200


@auth_bp.post("/verify")
@swag_from({
    "tags": ["Auth"],
    "summary": "Verify a wallet signature and issue a token",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {
                "walletAddress": {"type": "string", "example": "4Nd1mY..."},
                "signature": {"type": "array", "items": {"type": "integer"}},
                "message": {"type": "string", "example": "Sign this message to authenticate with VoteChain: 123"},
            },
            "required": ["walletAddress", "signature", "message"],
        },
    }],
    "responses": {
        200: {"description": "Token issued"},
        400: {"description": "Missing fields"},
        401: {"description": "Invalid signature or nonce"},
    },
})
def verify():
    payload = validate_or_raise(verify_schema, request.get_json(silent=True) or {})
    result = credentials.verify(
        payload["walletAddress"],
        payload["signature"],
        payload["message"],
    )
    return {"success": True, **result}, 200


@auth_bp.post("/check-admin")
@swag_from({
    "tags": ["Auth"],
    "summary": "Check whether a wallet is an admin wallet",
    "responses": {200: {"description": "OK"}, 400: {"description": "Missing wallet address"}},
})
def check_admin():
    payload = validate_or_raise(check_admin_schema, request.get_json(silent=True) or {})
    return {"success": True, "isAdmin": credentials.check_admin(payload["walletAddress"])}, 200


@auth_bp.get("/me")
@wallet_required
@swag_from({
    "tags": ["Auth"],
    "security": [{"BearerAuth": []}],
    "summary": "Current wallet and its admin status",
    "responses": {200: {"description": "OK"}, 401: {"description": "Unauthorized"}},
})
def me():
    wallet = g.wallet_address
    return {"success": True, "walletAddress": wallet, "isAdmin": get_policy().is_admin(wallet)}, 200


@auth_bp.post("/logout")
@wallet_required
@swag_from({
    "tags": ["Auth"],
    "security": [{"BearerAuth": []}],
    "summary": "Logout (revoke the current token)",
    "responses": {200: {"description": "Logged out"}, 401: {"description": "Unauthorized"}},
})
def logout():
    jti = get_jwt()["jti"]
    TokenBlocklist.revoke(jti, g.wallet_address)
    audit_log(action="LOGOUT", entity_type="AUTH", details={"jti": jti})
    db.session.commit()
    return {"success": True, "message": "Logged out successfully"}, 200
