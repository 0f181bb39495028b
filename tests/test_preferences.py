import pytest

from financeflow import preferences


def test_defaults_when_file_missing(tmp_path):
    prefs = preferences.load_preferences(tmp_path / 'missing.json')
    assert prefs == {'theme': 'light'}


def test_theme_round_trip(tmp_path):
    path = tmp_path / 'prefs.json'
    preferences.save_theme('dark', path)
    assert preferences.load_theme(path) == 'dark'


def test_invalid_theme_rejected(tmp_path):
    with pytest.raises(ValueError):
        preferences.save_theme('sepia', tmp_path / 'prefs.json')


def test_unknown_keys_are_not_kept(tmp_path):
    path = tmp_path / 'prefs.json'
    path.write_text('{"theme": "dark", "session_token": "abc"}', encoding='utf-8')
    assert preferences.load_preferences(path) == {'theme': 'dark'}
    preferences.save_theme('light', path)
    assert 'session_token' not in path.read_text(encoding='utf-8')


def test_corrupt_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / 'prefs.json'
    path.write_text('{not json', encoding='utf-8')
    assert preferences.load_theme(path) == 'light'


def test_unknown_stored_theme_falls_back(tmp_path):
    path = tmp_path / 'prefs.json'
    path.write_text('{"theme": "neon", "other": 1}', encoding='utf-8')
    assert preferences.load_preferences(path) == {'theme': 'light'}


def test_default_path_is_configurable(isolated_paths):
    preferences.save_theme('dark')
    assert (isolated_paths / 'preferences.json').exists()
    assert preferences.load_theme() == 'dark'
