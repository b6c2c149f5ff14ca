"""
Provision the newsletter operator account.

Reads the username and password from NEWSLETTER_OPERATOR_USERNAME and
NEWSLETTER_OPERATOR_PASSWORD, applies migrations, hashes the password
with Argon2id and stores the user. The password is never printed.
"""

import logging
import os
import sys
from pathlib import Path
from uuid import uuid4

from pydantic import SecretStr

from newsletter_service.adapters.auth.crypto import Argon2AuthAdapter
from newsletter_service.adapters.sqlite.migrator import SQLiteMigrator
from newsletter_service.adapters.sqlite_db import SQLiteConnectionPool, SQLiteUserRepo
from newsletter_service.config import load_settings
from newsletter_service.domain.errors import StorageError
from newsletter_service.telemetry import configure_logging

logger = logging.getLogger("seed_db")


def seed() -> int:
    settings = load_settings()
    configure_logging(settings.application.log_level)

    username = os.environ.get("NEWSLETTER_OPERATOR_USERNAME", "").strip()
    password = os.environ.get("NEWSLETTER_OPERATOR_PASSWORD", "")
    if not username or not password:
        logger.error(
            "Set NEWSLETTER_OPERATOR_USERNAME and NEWSLETTER_OPERATOR_PASSWORD to seed an operator"
        )
        return 1

    db_path = settings.database.path
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    logger.info("Seeding operator into %s", db_path)

    pool = SQLiteConnectionPool(db_path, max_connections=1)
    try:
        SQLiteMigrator(pool).run_migrations()
        repo = SQLiteUserRepo(pool)
        if repo.find_by_username(username) is not None:
            logger.info("Operator %r already exists, nothing to do", username)
            return 0
        password_hash = Argon2AuthAdapter().hash_password(SecretStr(password))
        repo.add_user(uuid4(), username, password_hash)
    except StorageError:
        logger.exception("Failed to seed operator %r", username)
        return 1
    finally:
        pool.close()

    logger.info("Operator %r created", username)
    return 0


if __name__ == "__main__":
    sys.exit(seed())
