from datetime import date
from pathlib import Path
import sys

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from financeflow import config, db, preferences
from financeflow.backend import MockBackend, SQLiteBackend
from financeflow.session import SessionController
from financeflow.store import Store

TODAY = date(2024, 3, 15)


@pytest.fixture(autouse=True)
def isolated_paths(tmp_path, monkeypatch):
    """Keep every test away from the real data directory."""
    data_dir = tmp_path / 'data'
    monkeypatch.setattr(config, 'DATA_DIR', data_dir)
    monkeypatch.setattr(config, 'DB_PATH', data_dir / 'financeflow.db')
    monkeypatch.setattr(config, 'PREFERENCES_PATH', data_dir / 'preferences.json')
    monkeypatch.setattr(db, 'DB_PATH', data_dir / 'financeflow.db')
    monkeypatch.setattr(preferences, 'PREFERENCES_PATH', data_dir / 'preferences.json')
    return data_dir


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def prefs_path(tmp_path):
    return tmp_path / 'preferences.json'


@pytest.fixture
def sqlite_backend(tmp_path):
    return SQLiteBackend(db_path=tmp_path / 'test.db')


@pytest.fixture
def mock_backend():
    return MockBackend(auth_delay=0)


@pytest.fixture
def controller(mock_backend, prefs_path):
    return SessionController(
        Store(),
        mock_backend,
        preferences_path=prefs_path,
        seed_sample_data=False,
        today=lambda: TODAY,
    )

