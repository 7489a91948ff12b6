import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.environ.get("CONFIG_FILE", os.path.join(ROOT_PATH, "env.yaml"))

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


def _get(key, default):
    """Environment variables win over env.yaml"""
    if key in os.environ:
        return os.environ[key]
    return data.get(key, default)


def _get_bool(key, default):
    value = _get(key, default)
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


class ApplicationConfig:
    DB_URI = _get("DB_URI", "sqlite+aiosqlite:///./auth.db")
    API_PREFIX = _get("API_PREFIX", "/api")
    API_PORT = int(_get("API_PORT", 8000))
    API_HOST = _get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = _get_bool("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = _get("LOG_LEVEL", "INFO")
    ENVIRONMENT = _get("ENVIRONMENT", "production")

    # Token signing (the two secrets must differ)
    JWT_ACCESS_SECRET = _get("JWT_ACCESS_SECRET", "dev-access-secret-change-in-production")
    JWT_REFRESH_SECRET = _get("JWT_REFRESH_SECRET", "dev-refresh-secret-change-in-production")
    ACCESS_TOKEN_TTL = _get("ACCESS_TOKEN_TTL", "1h")
    REFRESH_TOKEN_TTL = _get("REFRESH_TOKEN_TTL", "7d")

    # Lockout and password policy
    LOCKOUT_THRESHOLD = int(_get("LOCKOUT_THRESHOLD", 5))
    LOCKOUT_DURATION = _get("LOCKOUT_DURATION", "30m")
    BCRYPT_ROUNDS = int(_get("BCRYPT_ROUNDS", 10))
    PASSWORD_HISTORY_SIZE = int(_get("PASSWORD_HISTORY_SIZE", 5))
    IP_RESTRICTIONS_ENABLED = _get_bool("IP_RESTRICTIONS_ENABLED", False)
