"""Root conftest: point storage at in-memory SQLite for tests."""

import os

os.environ.setdefault("SCOUT_DB_URL", "sqlite:///:memory:")
