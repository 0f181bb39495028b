"""Configuration management for FinanceFlow.

This module centralizes all configuration values including paths,
defaults, and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base project root - assumes this file is in financeflow/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("FINANCEFLOW_DATA_DIR", _PROJECT_ROOT / "data"))

# Database
DB_PATH = Path(
    os.getenv("FINANCEFLOW_DB_PATH", DATA_DIR / "financeflow.db")
).resolve()

# Local key-value state (theme)
PREFERENCES_PATH = Path(
    os.getenv("FINANCEFLOW_PREFERENCES_PATH", DATA_DIR / "preferences.json")
).resolve()

# Backend selection: "sqlite" persists locally, "mock" keeps everything in memory
BACKEND = os.getenv("FINANCEFLOW_BACKEND", "sqlite").strip().lower()

# Artificial latency applied to mock-mode authentication calls (seconds)
MOCK_AUTH_DELAY = float(os.getenv("FINANCEFLOW_MOCK_AUTH_DELAY", "0.8"))

SESSION_TTL_HOURS = float(os.getenv("FINANCEFLOW_SESSION_TTL_HOURS", "168"))

SEED_SAMPLE_DATA = os.getenv("FINANCEFLOW_SEED_SAMPLE_DATA", "1").strip().lower() not in {
    "0", "false", "no", "off", ""
}

LOG_LEVEL = os.getenv("FINANCEFLOW_LOG_LEVEL", "INFO")

DEMO_EMAIL = "demo@financeflow.com"
DEMO_PASSWORD = "demo123"


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, DB_PATH.parent, PREFERENCES_PATH.parent]:
        directory.mkdir(parents=True, exist_ok=True)
