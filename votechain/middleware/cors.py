from flask import request


def init_cors(app):
    """Allow the configured frontend origin to call the API with credentials."""

    def _origin_allowed(origin: str | None) -> bool:
        allowed = app.config.get("FRONTEND_URL") or ""
        return bool(origin) and (allowed == "*" or origin == allowed.rstrip("/"))

    @app.before_request
    def _preflight():
        if request.method == "OPTIONS":
            # Empty 204; headers are attached below
            return app.response_class(status=204)
        return None

    @app.after_request
    def _add_cors_headers(response):
        origin = request.headers.get("Origin")
        if _origin_allowed(origin):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type, X-Request-Id"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
            response.headers["Access-Control-Expose-Headers"] = "X-Request-Id"
            response.headers.add("Vary", "Origin")
        return response
