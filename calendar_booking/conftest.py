# conftest.py
import os
import sys

# Make the repository root importable so 'import calendar_booking...' works
sys.path.insert(0, str(os.path.dirname(os.path.dirname(__file__))))

# Test environment: in-memory SQLite (see calendar_booking/db/base.py)
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
