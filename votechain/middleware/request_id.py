import re
import time
import uuid

from flask import g, request

# Inbound ids are echoed into headers and logs, keep them short and plain
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def init_request_id(app):
    @app.before_request
    def _assign_request_id():
        inbound = request.headers.get("X-Request-Id", "")
        g.request_id = inbound if _SAFE_REQUEST_ID.match(inbound) else str(uuid.uuid4())
        g.request_started = time.perf_counter()

    @app.after_request
    def _add_request_id_header(response):
        if hasattr(g, "request_id"):
            response.headers["X-Request-Id"] = g.request_id
            elapsed_ms = (time.perf_counter() - g.get("request_started", time.perf_counter())) * 1000
            app.logger.debug(
                "%s %s -> %s (%.1f ms) request_id=%s",
                request.method, request.path, response.status_code, elapsed_ms, g.request_id,
            )
        return response
