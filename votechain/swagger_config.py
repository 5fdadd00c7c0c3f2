def swagger_template(app=None):
    title = "VoteChain API"
    version = "1.0.0"

    if app:
        title = app.config.get("SWAGGER_TITLE", title)
        version = app.config.get("SWAGGER_VERSION", version)

    return {
        "swagger": "2.0",
        "info": {
            "title": title,
            "version": version,
            "description": "Wallet-authenticated polls: sign a nonce, get a token, vote once per poll.",
        },
        "basePath": "/",
        "tags": [
            {"name": "Auth", "description": "Nonce challenge and wallet signature sign-in"},
            {"name": "Polls", "description": "Browse polls; admin wallets manage their own"},
            {"name": "Voting", "description": "One vote per wallet per poll"},
        ],
        "securityDefinitions": {
            "BearerAuth": {
                "type": "apiKey",
                "name": "Authorization",
                "in": "header",
                "description": "JWT from /api/auth/verify: Bearer <token>"
            }
        },
        "definitions": {
            "ErrorResponse": {
                "type": "object",
                "properties": {
                    "success": {"type": "boolean", "example": False},
                    "message": {"type": "string", "example": "You have already voted in this poll"},
                    "error": {
                        "type": "object",
                        "properties": {
                            "code": {"type": "string", "example": "DUPLICATE_VOTE"},
                            "message": {"type": "string"},
                            "details": {"type": "object"}
                        }
                    },
                    "request_id": {"type": "string"}
                }
            }
        }
    }
