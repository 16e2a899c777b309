"""Management CLI.

Usage:
    python -m poultry_api.cli init-db                      # Create all tables
    python -m poultry_api.cli create-admin EMAIL PASSWORD  # Create or promote an admin
"""

import sys

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session

from poultry_api.auth.password import hash_password
from poultry_api.config import settings
from poultry_api.database import Base
from poultry_api.models import User, UserRole


def init_db():
    """Create every table on the sync URL (use Alembic for upgrades)."""
    engine = create_engine(settings.database_url_sync)
    Base.metadata.create_all(engine)
    print(f"Created {len(Base.metadata.tables)} table(s)")


def create_admin(email: str, password: str):
    engine = create_engine(settings.database_url_sync)
    with Session(engine) as session:
        user = session.execute(
            select(User).where(User.email == email.lower())
        ).scalar_one_or_none()
        if user:
            user.role = UserRole.ADMIN
            user.is_active = True
            print(f"  Promoted {user.email} to admin")
        else:
            user = User(
                email=email.lower(),
                password_hash=hash_password(password),
                first_name="System",
                last_name="Admin",
                role=UserRole.ADMIN,
            )
            session.add(user)
            print(f"  Created admin {user.email}")
        session.commit()


if __name__ == "__main__":
    cmd = sys.argv[1] if len(sys.argv) > 1 else ""
    if cmd == "init-db":
        init_db()
    elif cmd == "create-admin" and len(sys.argv) == 4:
        create_admin(sys.argv[2], sys.argv[3])
    else:
        print("Usage: python -m poultry_api.cli [init-db|create-admin EMAIL PASSWORD]")
