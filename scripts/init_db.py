#!/usr/bin/env python3
"""
Initialize the database schema for the configured backend (SQLite or D1)
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.config import settings
from app.db.connection import close_db, init_db

if __name__ == "__main__":
    print(f"🚀 Initializing {settings.APP_NAME} database ({settings.DATABASE_TYPE})...\n")

    init_db()
    close_db()

    print("✅ Database initialization complete!")
    print("\nNext steps:")
    print("1. Create an admin: python create_admin.py admin@example.com <password>")
    print("2. Start the API server: uvicorn main:app --reload")
    print("3. Visit http://localhost:8000/docs for API documentation")
