"""
Create (or promote) an admin account.

Public registration always creates plain users, so the first admin has to
be created from the command line:

    python create_admin.py admin@example.com --first-name Ada --last-name Admin
"""

import argparse
import getpass

from app.core.database import SessionLocal, init_db
from app.core.logging import configure_logging
from app.models.user import UserRole
from app.repositories.user_repository import user_repository
from app.schemas.user import UserRegister
from app.services.user_service import user_service


def main() -> None:
    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("email")
    parser.add_argument("--first-name", default="Admin")
    parser.add_argument("--last-name", default="User")
    args = parser.parse_args()

    configure_logging()
    init_db()

    db = SessionLocal()
    try:
        existing = user_repository.find_by_email(db, args.email)
        if existing:
            user_repository.update(db, existing, {"role": UserRole.ADMIN, "is_active": True})
            print(f"Promoted {existing.email} to admin")
            return

        password = getpass.getpass("Password: ")
        data = UserRegister(
            email=args.email,
            password=password,
            first_name=args.first_name,
            last_name=args.last_name,
        )
        user = user_service.create(db, data, role=UserRole.ADMIN)
        print(f"Created admin {user.email}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
