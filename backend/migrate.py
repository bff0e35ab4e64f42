#!/usr/bin/env python3
"""
Database migration script for deployments with a persistent DATABASE_URL.

This script runs Alembic migrations during the build/deploy process. The
default in-memory database needs no migrations; its schema is created when
the store starts.
"""

import subprocess
import sys
import os

from anon_feedback.database import is_memory_url


def run_migrations():
    """Run all pending database migrations"""
    database_url = os.getenv("DATABASE_URL", "sqlite://")
    if is_memory_url(database_url):
        print("ℹ️  In-memory database configured, nothing to migrate")
        return 0

    print("🔄 Running database migrations...")

    try:
        # Run alembic upgrade using subprocess
        result = subprocess.run(
            ["alembic", "upgrade", "head"],
            check=True,
            capture_output=True,
            text=True
        )

        print(result.stdout)
        print("✅ Migrations completed successfully!")
        return 0

    except subprocess.CalledProcessError as e:
        print("❌ Migration failed:")
        print(e.stdout)
        print(e.stderr)
        return 1
    except OSError as e:
        print(f"❌ Migration failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(run_migrations())
