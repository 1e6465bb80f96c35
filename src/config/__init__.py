from .config import (
    APPNAME, VERSION, SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES,
    LOG_LEVEL, DATABASE_URL, CORS_ORIGINS,
)

__all__ = [
    "APPNAME",
    "VERSION",
    "SECRET_KEY",
    "ALGORITHM",
    "ACCESS_TOKEN_EXPIRE_MINUTES",
    "LOG_LEVEL",
    "DATABASE_URL",
    "CORS_ORIGINS",
]
