"""Bootstrap the first super admin account."""
from __future__ import annotations

import os
import sys

from dotenv import load_dotenv

load_dotenv()

from helpdesk import db
from helpdesk.config import get_settings
from helpdesk.models.user import UserRole
from helpdesk.schemas.user import AccountCreate
from helpdesk.services.accounts import AccountService
from helpdesk.services.credentials import CredentialStore
from helpdesk.services.exceptions import ValidationError
from helpdesk.services.passwords import get_hasher


def main() -> int:
    settings = get_settings()
    print(f"Using database: {settings.database_url}")

    username = os.getenv("ADMIN_USERNAME", "admin")
    email = os.getenv("ADMIN_EMAIL", "admin@example.com")
    password = os.getenv("ADMIN_PASSWORD")
    if not password:
        print("ADMIN_PASSWORD must be set.", file=sys.stderr)
        return 1

    session = db.get_sessionmaker()()
    try:
        if CredentialStore(session).count_active(UserRole.super_admin) > 0:
            print("An active super admin already exists; nothing to do.")
            return 0
        service = AccountService(session, get_hasher())
        try:
            user = service.create_account(
                AccountCreate(username=username, email=email, password=password, role=UserRole.super_admin)
            )
        except ValidationError as exc:
            for error in exc.errors:
                print(f"- {error}", file=sys.stderr)
            return 1
        print(f"Super admin '{user.username}' created (id={user.id}).")
        return 0
    finally:
        session.close()


if __name__ == "__main__":
    sys.exit(main())
