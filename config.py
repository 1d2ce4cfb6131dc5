"""
Random Quotes - Configuration
Paths, constants, and intervals
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# =============================================================================
# PATHS
# =============================================================================
PROJECT_ROOT = Path(__file__).parent
DATA_DIR = Path(os.getenv("QUOTES_DATA_DIR", str(PROJECT_ROOT / "data")))
LOGS_DIR = Path(os.getenv("QUOTES_LOGS_DIR", str(PROJECT_ROOT / "logs")))
DATABASE_PATH = Path(os.getenv("QUOTES_DATABASE_PATH", str(DATA_DIR / "preferences.db")))
DIAGNOSTIC_LOG_PATH = LOGS_DIR / "diagnostic.log"

# =============================================================================
# VERSION
# =============================================================================
VERSION = "0.1.0"
PROJECT_NAME = "Random Quotes"

# =============================================================================
# DATABASE CONFIGURATION
# =============================================================================
DB_BUSY_TIMEOUT_MS = int(os.getenv("DB_BUSY_TIMEOUT_MS", "10000"))

# =============================================================================
# QUOTE FILES
# =============================================================================
# Separator between file paths in the single configuration input string
QUOTE_PATH_SEPARATOR = ";"

# Exact, case-sensitive suffix after the last "." ("notes.TXT" is rejected)
QUOTE_FILE_EXTENSION = "txt"

QUOTE_FILE_ENCODING = os.getenv("QUOTE_FILE_ENCODING", "utf-8")

# Files are read one after another when this is 1. Larger values read files
# in a thread pool; quotes are still concatenated in path-list order.
INGEST_MAX_WORKERS = int(os.getenv("INGEST_MAX_WORKERS", "1"))

# =============================================================================
# CONCURRENCY
# =============================================================================
# How long a save waits for another save on the same widget (None = forever)
_save_timeout = os.getenv("SAVE_LOCK_TIMEOUT_SECONDS", "30")
SAVE_LOCK_TIMEOUT_SECONDS = float(_save_timeout) if _save_timeout else None

# =============================================================================
# DISPLAY ROTATION
# =============================================================================
# Seconds between random quote refreshes in watch mode
QUOTE_REFRESH_INTERVAL = float(os.getenv("QUOTE_REFRESH_INTERVAL", "30"))
QUOTE_ROTATION_ENABLED = os.getenv("QUOTE_ROTATION_ENABLED", "true").lower() == "true"

# Shown by the display layer when a widget has no quotes yet
NO_QUOTES_MESSAGE = "No quotes configured yet."

# =============================================================================
# LOGGING
# =============================================================================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_TO_FILE = True
LOG_TO_CONSOLE = True
