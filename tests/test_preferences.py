"""Tests for persisted preferences."""

import json

from drawvault import Preferences, PreferenceStore
from drawvault.preferences import MAX_RECENT_DIRECTORIES, PREFERENCES_KEY


def test_defaults_when_store_missing(tmp_path):
    store = PreferenceStore(tmp_path / "missing" / "preferences.json")
    prefs = store.load_preferences()
    assert prefs == Preferences()
    assert prefs.theme == "system"
    assert prefs.sidebar_visible


def test_round_trip(tmp_path):
    store = PreferenceStore(tmp_path / "cfg" / "preferences.json")
    prefs = Preferences(theme="dark", sidebar_visible=False)
    prefs.remember_directory("/drawings")
    store.save_preferences(prefs)

    loaded = store.load_preferences()
    assert loaded == prefs
    raw = json.loads(store.path.read_text(encoding="utf-8"))
    assert raw[PREFERENCES_KEY]["last_directory"] == "/drawings"


def test_other_keys_are_kept(tmp_path):
    store = PreferenceStore(tmp_path / "preferences.json")
    store.set("window", {"width": 800})
    store.save_preferences(Preferences())
    assert store.get("window") == {"width": 800}


def test_malformed_store_falls_back(tmp_path):
    path = tmp_path / "preferences.json"
    path.write_text("{not json", encoding="utf-8")
    assert PreferenceStore(path).load_preferences() == Preferences()

    path.write_text(json.dumps({PREFERENCES_KEY: {"theme": 3, "recent_directories": ["/a", 5]}}))
    prefs = PreferenceStore(path).load_preferences()
    assert prefs.theme == "system"
    assert prefs.recent_directories == ["/a"]


def test_remember_directory_is_bounded_and_deduplicated():
    prefs = Preferences()
    for n in range(MAX_RECENT_DIRECTORIES + 5):
        prefs.remember_directory(f"/d{n}")
    prefs.remember_directory("/d10")
    assert len(prefs.recent_directories) == MAX_RECENT_DIRECTORIES
    assert prefs.recent_directories[0] == "/d10"
    assert prefs.recent_directories.count("/d10") == 1
    assert prefs.last_directory == "/d10"
