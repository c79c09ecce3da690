import os

# Settings are read at import time; point the app at an in-memory database before any test imports it.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["CHECKIN_RETRY_DELAY_SECONDS"] = "0"
