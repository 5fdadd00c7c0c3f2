import os
from datetime import timedelta
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent  # project root (where wsgi.py is)
load_dotenv(BASE_DIR / ".env")

class Config:
    APP_ENV = os.getenv("APP_ENV", "development")
    IS_PRODUCTION = APP_ENV == "production"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    PORT = int(os.getenv("PORT", "5000"))

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///votechain.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "jwt-dev-secret")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(
        minutes=int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES_MIN", "1440"))
    )

    # Comma-delimited; re-read on every admin check
    ADMIN_WALLET_ADDRESSES = os.getenv("ADMIN_WALLET_ADDRESSES", "")

    # Wallet sign-in challenge
    NONCE_LENGTH = int(os.getenv("NONCE_LENGTH", "16"))
    NONCE_TTL_SECONDS = int(os.getenv("NONCE_TTL_SECONDS", "300"))  # 5 minutes

    POLLS_DEFAULT_PAGE_SIZE = int(os.getenv("POLLS_DEFAULT_PAGE_SIZE", "10"))
    POLLS_MAX_PAGE_SIZE = int(os.getenv("POLLS_MAX_PAGE_SIZE", "100"))

    # CORS
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

    SWAGGER = {"title": "VoteChain API", "uiversion": 3}


class TestConfig(Config):
    TESTING = True
    APP_ENV = "testing"
    IS_PRODUCTION = False
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JWT_SECRET_KEY = "test-jwt-secret-with-enough-length-for-hs256"
    ADMIN_WALLET_ADDRESSES = ""
