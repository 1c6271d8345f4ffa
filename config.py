import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./test.db")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Password recovery
    RESET_ROUTE = data.get("RESET_ROUTE", "/forgot-password")
    RESPONSE_MODE = data.get("RESPONSE_MODE", "rest")  # "rest" or "interactive"
    RESET_VIEWS = data.get("RESET_VIEWS", {})
    RESET_TOKEN_TTL_SECONDS = int(data.get("RESET_TOKEN_TTL_SECONDS", 3600))
    RESET_TOKEN_BYTES = int(data.get("RESET_TOKEN_BYTES", 32))
    REQUIRE_EMAIL_VERIFIED = bool(data.get("REQUIRE_EMAIL_VERIFIED", True))
    REVEAL_ACCOUNT_EXISTENCE = bool(data.get("REVEAL_ACCOUNT_EXISTENCE", False))
    MIN_PASSWORD_LENGTH = int(data.get("MIN_PASSWORD_LENGTH", 8))
    BCRYPT_ROUNDS = int(data.get("BCRYPT_ROUNDS", 12))

    # Mail delivery
    MAIL_BACKEND = data.get("MAIL_BACKEND", "log")  # "log" or "smtp"
    MAIL_FROM = data.get("MAIL_FROM", "no-reply@localhost")
    SMTP_HOST = data.get("SMTP_HOST", "localhost")
    SMTP_PORT = int(data.get("SMTP_PORT", 587))
    SMTP_USER = data.get("SMTP_USER", "")
    SMTP_PASSWORD = data.get("SMTP_PASSWORD", "")
    SMTP_USE_TLS = bool(data.get("SMTP_USE_TLS", True))
    RESET_LINK_BASE_URL = data.get("RESET_LINK_BASE_URL", "http://localhost:8000")
