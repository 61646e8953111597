#!/usr/bin/env python3
"""Create (or update) an account with a chosen role."""

import sys
from getpass import getpass
from pathlib import Path

# Make the backend directory importable when run as a script
BASE_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BASE_DIR))

from sqlmodel import Session, select

from vendor_market.core.roles import Role
from vendor_market.core.security import get_password_hash
from vendor_market.db import engine, init_db
from vendor_market.models import User, UserProfile

ROLE_CHOICES = ", ".join(role.value for role in Role)


def create_user():
    print("=" * 60)
    print("Create account")
    print("=" * 60)

    email = input("Email: ").strip().lower()
    if not email:
        print("Error: email is required")
        return

    password = getpass("Password: ").strip()
    if len(password) < 6:
        print("Error: password must be at least 6 characters")
        return

    role_value = input(f"Role ({ROLE_CHOICES}, default vendor): ").strip() or Role.VENDOR.value
    try:
        role = Role(role_value)
    except ValueError:
        print(f"Error: unknown role {role_value!r}")
        return

    init_db()
    with Session(engine) as session:
        user = session.exec(select(User).where(User.email == email)).first()
        existing = user is not None

        if existing:
            print(f"\nAn account for {email} already exists.")
            if input("Update password and role? (y/n): ").strip().lower() != "y":
                print("Cancelled")
                return
            user.hashed_password = get_password_hash(password)
            session.add(user)
        else:
            user = User(email=email, hashed_password=get_password_hash(password))
            session.add(user)
            # Inserting the user provisions its vendor profile
            session.flush()

        profile = session.get(UserProfile, user.id) or UserProfile(id=user.id)
        profile.role = role.value
        profile.touch()
        session.add(profile)
        session.commit()
        session.refresh(user)

        print(f"\n✓ Account {'updated' if existing else 'created'}")
        print(f"  ID: {user.id}")
        print(f"  Email: {user.email}")
        print(f"  Role: {role.value}")
        print("=" * 60)


if __name__ == "__main__":
    try:
        create_user()
    except KeyboardInterrupt:
        print("\n\nCancelled")
