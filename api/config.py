"""
Environment-aware configuration.
Values come from the process environment (and .env when present). The auth
related keys are turned into one frozen services.settings.AuthSettings in
create_app(); nothing below the API layer reads the environment directly.
"""
import os
from dotenv import load_dotenv

from utils.validators import parse_bool

load_dotenv()  # Read .env if present

DEV_JWT_SECRET = "dev-secret-change-me-at-least-32-bytes"


class BaseConfig:
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    # Keep a copy of env for visibility
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # jwt configurations; lifetimes are duration strings ("15m", "7d", "1h30m")
    JWT_SECRET = os.getenv("JWT_SECRET", "")
    ACCESS_TOKEN_EXPIRY = os.getenv("ACCESS_TOKEN_EXPIRY", "15m")
    REFRESH_TOKEN_EXPIRY = os.getenv("REFRESH_TOKEN_EXPIRY", "7d")

    # Argon2 work factor; unset keeps argon2-cffi's defaults
    PASSWORD_HASH_TIME_COST = os.getenv("PASSWORD_HASH_TIME_COST")
    PASSWORD_HASH_MEMORY_COST = os.getenv("PASSWORD_HASH_MEMORY_COST")
    PASSWORD_HASH_PARALLELISM = os.getenv("PASSWORD_HASH_PARALLELISM")

    # Revoke every session of a user when one of their rotated refresh tokens is replayed
    REVOKE_SESSIONS_ON_REUSE = parse_bool(os.getenv("REVOKE_SESSIONS_ON_REUSE"))


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    JWT_SECRET = os.getenv("JWT_SECRET", DEV_JWT_SECRET)


class TestingConfig(BaseConfig):
    TESTING = True
    JWT_SECRET = "test-secret-with-enough-bytes-for-hs256"
    # cheap Argon2 parameters so the suite stays fast
    PASSWORD_HASH_TIME_COST = 1
    PASSWORD_HASH_MEMORY_COST = 1024
    PASSWORD_HASH_PARALLELISM = 1


class ProductionConfig(BaseConfig):
    DEBUG = False


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/prod/test).
    """
    if name:
        name = name.lower()
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
