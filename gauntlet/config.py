"""Configuration for Gauntlet."""

import os
from pathlib import Path

# Paths
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("GAUNTLET_DATA_DIR", BASE_DIR / "data"))
DB_URL = os.getenv("GAUNTLET_DB_URL", f"sqlite:///{DATA_DIR / 'gauntlet.db'}")
CHALLENGES_FILE = Path(os.getenv("GAUNTLET_CHALLENGES_FILE", DATA_DIR / "challenges.json"))

# Ledger
LEDGER_READ_RETRIES = int(os.getenv("LEDGER_READ_RETRIES", "2"))

# Leaderboard
LEADERBOARD_LIMIT = int(os.getenv("LEADERBOARD_LIMIT", "100"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# API
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
