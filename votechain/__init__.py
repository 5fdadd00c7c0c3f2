import logging

from flask import Flask
from flasgger import Swagger

from .config import Config
from .errors import register_error_handlers, AuthenticationError, error_response
from .extensions import db, migrate, jwt
from .middleware.cors import init_cors
from .middleware.request_id import init_request_id
from .models.token_blocklist import TokenBlocklist
from .swagger_config import swagger_template
from .utils.access import AccessPolicy, config_admin_source, NOT_AUTHORIZED


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    app.logger.setLevel(level)
    logging.getLogger("votechain").setLevel(level)


def _register_jwt_callbacks() -> None:
    # Any token problem is reported as a plain 401 in our error envelope
    def _unauthorized(reason):
        return error_response(AuthenticationError(NOT_AUTHORIZED, details={"reason": reason}))

    @jwt.unauthorized_loader
    def _missing_token(reason):
        return _unauthorized(reason)

    @jwt.invalid_token_loader
    def _invalid_token(reason):
        return _unauthorized(reason)

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return _unauthorized("Token has expired")

    @jwt.revoked_token_loader
    def _revoked_token(jwt_header, jwt_payload):
        return _unauthorized("Token has been revoked")

    @jwt.token_in_blocklist_loader
    def _is_token_revoked(jwt_header, jwt_payload) -> bool:
        jti = jwt_payload.get("jti")
        if not jti:
            return True
        return TokenBlocklist.is_revoked(jti)


def create_app(config_class=Config) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_class)
    _configure_logging(app)

    Swagger(app, template=swagger_template(app))

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    _register_jwt_callbacks()

    # Admin membership is re-read from app.config on every check
    app.extensions["access_policy"] = AccessPolicy(config_admin_source(app))

    # Middleware + errors
    init_request_id(app)
    init_cors(app)
    register_error_handlers(app)

    # Blueprint imports
    from .api.auth.routes import auth_bp
    from .api.poll.routes import polls_bp
    from .api.voting.routes import voting_bp

    # Blueprints
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(polls_bp, url_prefix="/api/polls")
    app.register_blueprint(voting_bp, url_prefix="/api/votes")

    @app.cli.command("init-db")
    def init_db():
        """Create all tables (use flask db upgrade once migrations exist)."""
        db.create_all()
        app.logger.info("Database tables created")

    @app.cli.command("purge-nonces")
    def purge_nonces():
        """Delete expired sign-in nonces."""
        from .services.credentials import purge_expired_nonces

        removed = purge_expired_nonces()
        db.session.commit()
        app.logger.info("Purged %s expired nonces", removed)

    # Health check
    @app.get("/health")
    def health():
        return {"status": "ok"}, 200

    return app
