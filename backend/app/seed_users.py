# backend/app/seed_users.py
"""Create or reset an admin account.

    python -m app.seed_users --email admin@example.com --password s3cret --name "Admin"
"""

import argparse

from sqlalchemy.orm import Session

from app.core.database import Base, SessionLocal, engine
from app.core.security import hash_password
from app.services import users as users_service


def seed_admin(db: Session, *, email: str, password: str, name: str) -> str:
    """Return "created" or "updated"."""
    existing = users_service.get_user_for_login(db, email)
    if existing:
        # force reset password hash and promote
        existing.password_hash = hash_password(password)
        existing.role = "admin"
        existing.name = name
        db.commit()
        return "updated"

    users_service.create_user(db, name=name, email=email, password=password, role="admin")
    return "created"


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Create or reset an admin user.")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--name", default="Administrator")
    args = parser.parse_args(argv)

    Base.metadata.create_all(bind=engine)

    db: Session = SessionLocal()
    try:
        result = seed_admin(db, email=args.email, password=args.password, name=args.name)
    finally:
        db.close()

    print(f"{result.capitalize()} admin: {args.email.strip().lower()}")


if __name__ == "__main__":
    main()
