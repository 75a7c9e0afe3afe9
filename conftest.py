from __future__ import annotations

import os

# Settings are cached on first use; pin a throwaway database and cheap password
# hashing before any boosteam module is imported.
os.environ.setdefault("BOOSTEAM_ENVIRONMENT", "test")
os.environ.setdefault("BOOSTEAM_TEST_DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("BOOSTEAM_PASSWORD_HASH_ITERATIONS", "1000")
os.environ.setdefault("BOOSTEAM_SEED_ON_STARTUP", "false")
os.environ.setdefault("BOOSTEAM_JWT_SECRET_KEY", "test-secret")
