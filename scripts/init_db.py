#!/usr/bin/env python
"""Initialize database and seed the manager and two regular users."""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.exc import SQLAlchemyError

from models import init_db, User, UserRole
from models.database import SessionLocal

SEED_USERS = [
    {"username": "manager", "name": "Manager", "role": UserRole.MANAGER},
    {"username": "user1", "name": "User One", "role": UserRole.USER},
    {"username": "user2", "name": "User Two", "role": UserRole.USER},
]


def seed_users():
    """Create the seed users that do not exist yet."""
    db = SessionLocal()
    try:
        for data in SEED_USERS:
            existing = db.query(User).filter(User.username == data["username"]).first()
            if existing:
                print(f"User {data['username']} already exists (id={existing.id})")
                continue

            user = User(is_active=True, **data)
            db.add(user)
            db.flush()
            print(f"✅ Created {data['role'].value}: {user.username} (id={user.id})")

        db.commit()

    except SQLAlchemyError as e:
        print(f"❌ Error seeding users: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def main():
    """Initialize database."""
    print("🗄️  Initializing database...")

    try:
        init_db()
        print("✅ Database tables created")

        seed_users()

        print("✅ Database initialization complete!")

    except SQLAlchemyError as e:
        print(f"❌ Error initializing database: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
