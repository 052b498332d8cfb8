"""Root conftest — shared test configuration."""

import os

# Ensure tests don't accidentally use real API keys or the real stores
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-test-fake-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CONFIG_STORE_URL", "")
os.environ.setdefault("ADMIN_TOKEN", "test-admin-token")
os.environ.setdefault("LOG_FORMAT", "text")
