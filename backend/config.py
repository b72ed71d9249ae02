# config.py
import os
from pathlib import Path

BASE_DIR = Path(__file__).parent

# Environment
ENV = os.environ.get("HMS_ENV", "development")
DEBUG = ENV == "development"

# SQLite by default (hms.db in the same folder)
DATABASE_URL = os.environ.get("HMS_DATABASE_URL") or f"sqlite:///{BASE_DIR / 'hms.db'}"

HOST = os.environ.get("HMS_HOST", "0.0.0.0")
PORT = int(os.environ.get("HMS_PORT", 8000))

# Logging
LOG_LEVEL = os.environ.get("HMS_LOG_LEVEL", "DEBUG" if DEBUG else "INFO")
LOG_FILE = os.environ.get("HMS_LOG_FILE") or None

# Header carrying the already-authenticated caller id
USER_HEADER = os.environ.get("HMS_USER_HEADER", "X-User-Id")
