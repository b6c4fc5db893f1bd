"""Pytest configuration for all tests."""

import os

# Keep tests off the on-disk development database
os.environ.setdefault("ROLEDESK_ENVIRONMENT", "testing")
os.environ.setdefault("ROLEDESK_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
