"""
Create the initial back-office accounts.

    DATABASE_URL=... DATABASE_NAME=... SEED_PASSWORD=... python seed.py

Accounts whose email already exists are left untouched.
"""
import logging
import os
from typing import Iterable, List

from database import Database
from schemas import User
from security import hash_password

logger = logging.getLogger(__name__)

SEED_PASSWORD = os.getenv("SEED_PASSWORD", "password123")
SEED_SUPERADMIN_EMAIL = os.getenv("SEED_SUPERADMIN_EMAIL", "superadmin@ecocropshare.com")
SEED_ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@ecocropshare.com")

DEFAULT_ACCOUNTS = (
    {"name": "Super Administrator", "email": SEED_SUPERADMIN_EMAIL, "role": "superadmin"},
    {"name": "Administrator", "email": SEED_ADMIN_EMAIL, "role": "admin"},
)


def seed_accounts(db: Database, accounts: Iterable[dict], password: str) -> List[str]:
    """Insert missing accounts and return the emails that were created."""
    created = []
    for account in accounts:
        email = account["email"].strip().lower()
        if db["user"].find_one({"email": email}):
            logger.info("User %s already exists, skipping", email)
            continue
        user = User(
            name=account["name"],
            email=email,
            password_hash=hash_password(password),
            role=account["role"],
            is_active=True,
            email_verified=True,
        )
        db.create_document("user", user)
        logger.info("Created %s: %s", account["role"], email)
        created.append(email)
    return created


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    database = Database.from_env()
    try:
        database.ensure_indexes()
        seed_accounts(database, DEFAULT_ACCOUNTS, SEED_PASSWORD)
    finally:
        database.close()
