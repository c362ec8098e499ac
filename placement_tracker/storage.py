"""
Local durable storage.

Two JSON entries survive between runs: the in-progress draft report and the
active session. Each entry is a single file that is overwritten wholesale on
every write and deleted on reset/logout.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from placement_tracker.config import TrackerConfig
from placement_tracker.exceptions import StorageCorruptError
from placement_tracker.logging_config import logger


DRAFT_KEY = "placementFormData"
SESSION_KEY = "user"


class LocalStore:
    """Key/value store backed by one JSON file per key"""

    def __init__(self, paths: Dict[str, str]):
        self._paths = {key: Path(path) for key, path in paths.items()}

    @classmethod
    def from_config(cls, config: TrackerConfig) -> "LocalStore":
        return cls({
            DRAFT_KEY: config.draft_file,
            SESSION_KEY: config.session_file,
        })

    def path_for(self, key: str) -> Path:
        try:
            return self._paths[key]
        except KeyError:
            raise KeyError(f"Unknown storage key: {key}") from None

    def exists(self, key: str) -> bool:
        return self.path_for(key).exists()

    def read(self, key: str) -> Optional[Any]:
        """Return the decoded entry, None when absent; raises StorageCorruptError"""
        path = self.path_for(key)
        if not path.exists():
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StorageCorruptError(key, str(e)) from e

    def write(self, key: str, value: Any, private: bool = False) -> None:
        """Replace the entry with ``value``"""
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path = path.with_name(path.name + ".tmp")
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(value, f, indent=2)
        os.replace(tmp_path, path)

        if private:
            # Owner-only access; not supported everywhere
            try:
                os.chmod(path, 0o600)
            except OSError:
                logger.debug(f"Could not restrict permissions on {path}")

    def remove(self, key: str) -> None:
        path = self.path_for(key)
        if path.exists():
            path.unlink()
