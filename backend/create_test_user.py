#!/usr/bin/env python
"""Create demo operator accounts (a pharmacist and a cashier) for development."""

from pharmacare.db.init_db import init_db
from pharmacare.db.session import SessionLocal
from pharmacare.schemas.user import UserCreate
from pharmacare.services import user_service

DEMO_USERS = [
    UserCreate(username="pharmacist", password="Pharma@2024", full_name="Demo Pharmacist", role="pharmacist"),
    UserCreate(username="cashier", password="Cashier@2024", full_name="Demo Cashier", role="cashier"),
]


def main():
    init_db()
    db = SessionLocal()
    try:
        users = user_service.list_users(db)
        print(f"\n{'='*60}")
        print(f"Current users in database: {len(users)}")
        print(f"{'='*60}")
        for u in users:
            print(f"  - ID: {u.id} | {u.username} ({u.role}){'' if u.is_active else ' inactive'}")

        for data in DEMO_USERS:
            if user_service.get_user_by_username(db, data.username):
                print(f"\n  {data.username} already exists")
                continue
            user_service.create_user(db, data)
            print(f"\n[OK] Created {data.role}: {data.username} / {data.password}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
