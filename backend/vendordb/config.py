# backend/vendordb/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/vendordb.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///vendordb.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # When True, every UPDATE of a location writes both a LOCATION_AVAILABILITY
    # and a LOCATION_ADDRESS row (and every location item UPDATE writes a
    # MENU_AVAILABILITY row), whether or not the logged column changed.
    AUDIT_LOG_EVERY_UPDATE = _env_flag("AUDIT_LOG_EVERY_UPDATE")

    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    AUDIT_LOG_EVERY_UPDATE = False
    BCRYPT_ROUNDS = 4
    LOG_LEVEL = "DEBUG"
