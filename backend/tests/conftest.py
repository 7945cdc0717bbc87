"""Root conftest — shared test configuration."""

import os

# Ensure tests don't accidentally use real API keys or on-disk stores
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-test-fake-key")
os.environ.setdefault("QWEATHER_KEY", "")
os.environ.setdefault("DATABASE_BACKEND", "memory")
