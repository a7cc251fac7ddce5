"""
Shared test setup. Environment is pinned before any warden import so that the
module-level settings and engine pick up an in-memory SQLite URL, a fixed
signing secret and a cheap bcrypt cost.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-0123456789abcdef0123456789abcdef"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["APP_ENV"] = "dev"
os.environ.pop("PROVISIONING_OPEN", None)
