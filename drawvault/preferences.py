"""
preferences.py - Persistent Preferences

Preferences are one JSON blob stored under the ``"preferences"`` key of a
JSON file in the user config directory. Malformed or missing data falls back
to defaults.
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import List, Optional
import json
import logging

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "drawvault"
STORE_FILENAME = "preferences.json"
PREFERENCES_KEY = "preferences"
MAX_RECENT_DIRECTORIES = 10


def default_store_path() -> Path:
    return Path(user_config_dir(APP_NAME, appauthor=False)) / STORE_FILENAME


@dataclass
class Preferences:
    """User preferences"""
    last_directory: Optional[str] = None
    recent_directories: List[str] = field(default_factory=list)
    theme: str = "system"
    sidebar_visible: bool = True

    @classmethod
    def from_dict(cls, data: object) -> "Preferences":
        if not isinstance(data, dict):
            return cls()
        prefs = cls()
        last = data.get("last_directory")
        if isinstance(last, str):
            prefs.last_directory = last
        recent = data.get("recent_directories")
        if isinstance(recent, list):
            prefs.recent_directories = [d for d in recent if isinstance(d, str)]
        theme = data.get("theme")
        if isinstance(theme, str) and theme:
            prefs.theme = theme
        sidebar = data.get("sidebar_visible")
        if isinstance(sidebar, bool):
            prefs.sidebar_visible = sidebar
        return prefs

    def remember_directory(self, directory: str) -> None:
        """Move a directory to the front of the recent list"""
        recent = [d for d in self.recent_directories if d != directory]
        recent.insert(0, directory)
        self.recent_directories = recent[:MAX_RECENT_DIRECTORIES]
        self.last_directory = directory


class PreferenceStore:
    """Get/set JSON blobs under keys of one JSON file"""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else default_store_path()

    def _load_all(self) -> dict:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable preference store %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> object:
        return self._load_all().get(key)

    def set(self, key: str, value: object) -> None:
        data = self._load_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")

    def load_preferences(self) -> Preferences:
        return Preferences.from_dict(self.get(PREFERENCES_KEY))

    def save_preferences(self, prefs: Preferences) -> None:
        self.set(PREFERENCES_KEY, asdict(prefs))
