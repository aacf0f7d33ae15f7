#!/usr/bin/env python3
"""
Create Admin User Script
Provisions an active admin account for the payout gateway dashboard
"""

import sys
import os
import getpass

# Add the app directory to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.core.exceptions import GatewayError
from app.db.connection import close_db, get_db, init_db
from app.services.auth_service import AuthService, MIN_PASSWORD_LENGTH


def create_admin_user(email: str, password: str, contact_person: str = None) -> bool:
    """Create an admin account; returns False if it could not be created"""
    init_db()

    try:
        admin = AuthService(get_db()).create_admin(email, password, contact_person=contact_person)
    except GatewayError as e:
        print(f"❌ Error: {e.message}")
        return False
    finally:
        close_db()

    print("=" * 60)
    print("✅ Admin User Created Successfully!")
    print("=" * 60)
    print(f"ID:            {admin['id']}")
    print(f"Email:         {admin['email']}")
    print(f"Role:          {admin['role']}")
    print(f"Status:        {admin['status']}")
    print("=" * 60)
    print("\n⚠️  Admins moderate merchants and orders; they have no wallet.")
    return True


def main():
    """Main function"""
    print("=" * 60)
    print("USDT Payout Gateway - Create Admin User")
    print("=" * 60)
    print()

    # Get email
    if len(sys.argv) > 1:
        email = sys.argv[1]
    else:
        email = input("Enter admin email: ").strip()

    if not email:
        print("❌ Error: Email is required!")
        sys.exit(1)

    # Get password
    if len(sys.argv) > 2:
        password = sys.argv[2]
    else:
        password = getpass.getpass("Enter admin password: ").strip()

    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"❌ Error: Password must be at least {MIN_PASSWORD_LENGTH} characters!")
        sys.exit(1)

    print()

    sys.exit(0 if create_admin_user(email, password) else 1)


if __name__ == "__main__":
    main()
