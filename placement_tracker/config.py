"""
Placement Tracker Configuration Management
"""

import os
import json
from pathlib import Path
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any

from dotenv import load_dotenv


DEFAULT_API_BASE_URL = "https://backend-pqg1.onrender.com"


@dataclass
class TrackerConfig:
    """Configuration for the Placement Tracker CLI"""

    # API settings
    api_base_url: str = DEFAULT_API_BASE_URL
    timeout: Optional[float] = None  # None waits indefinitely

    # Output settings
    verbose: bool = False
    export_dir: str = "."

    # Dashboard settings
    chart_window: int = 7
    recent_window: int = 5
    college_a_label: str = "SNSCE"
    college_b_label: str = "SNSCT"

    # Local storage (relative names resolve under config_dir)
    draft_file: str = "placementFormData.json"
    session_file: str = "user.json"
    history_file: str = ".placement_history"

    # Logging
    log_level: str = "WARNING"
    log_file: Optional[str] = None

    # Paths
    config_dir: str = field(default_factory=lambda: str(Path.home() / ".placement_tracker"))

    def __post_init__(self):
        """Initialize paths and directories"""
        self._resolve_paths()

    def _resolve_paths(self) -> None:
        Path(self.config_dir).mkdir(parents=True, exist_ok=True)

        if not os.path.isabs(self.draft_file):
            self.draft_file = str(Path(self.config_dir) / self.draft_file)
        if not os.path.isabs(self.session_file):
            self.session_file = str(Path(self.config_dir) / self.session_file)
        if not os.path.isabs(self.history_file):
            self.history_file = str(Path(self.config_dir) / self.history_file)

    def load_from_file(self, config_path: str) -> None:
        """Load configuration from JSON file"""
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                data = json.load(f)
                for key, value in data.items():
                    if hasattr(self, key):
                        setattr(self, key, value)
            self._resolve_paths()

    def save_to_file(self, config_path: Optional[str] = None) -> None:
        """Save configuration to JSON file"""
        path = Path(config_path or (Path(self.config_dir) / "config.json"))
        with open(path, 'w') as f:
            json.dump(asdict(self), f, indent=2)

    @classmethod
    def load_default(cls, config_path: Optional[str] = None) -> "TrackerConfig":
        """Load configuration from ``config_path`` or the user config directory"""
        load_dotenv()

        config_dir = os.environ.get("PLACEMENT_CONFIG_DIR")
        config = cls(config_dir=config_dir) if config_dir else cls()

        file_path = Path(config_path) if config_path else Path(config.config_dir) / "config.json"
        if file_path.exists():
            config.load_from_file(str(file_path))

        # Override with environment variables
        config._load_from_env()

        return config

    def _load_from_env(self) -> None:
        """Load configuration from environment variables"""
        env_mappings = {
            "PLACEMENT_API_URL": "api_base_url",
            "PLACEMENT_TIMEOUT": ("timeout", float),
            "PLACEMENT_EXPORT_DIR": "export_dir",
            "PLACEMENT_LOG_LEVEL": "log_level",
            "PLACEMENT_LOG_FILE": "log_file",
            "PLACEMENT_COLLEGE_A": "college_a_label",
            "PLACEMENT_COLLEGE_B": "college_b_label",
            "PLACEMENT_VERBOSE": ("verbose", lambda x: x.lower() == "true"),
        }

        for env_var, mapping in env_mappings.items():
            value = os.environ.get(env_var)
            if value:
                if isinstance(mapping, tuple):
                    attr, converter = mapping
                    setattr(self, attr, converter(value))
                else:
                    setattr(self, mapping, value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary"""
        return asdict(self)
