"""
Settings management for gitscope
"""

import copy
import json
import os
from pathlib import Path
from typing import Any

from gitscope.constants import (
    DEFAULT_CONTEXT_LINES,
    DEFAULT_PAGE_SIZE,
    DEFAULT_PALETTE_SIZE,
    DEFAULT_REFETCH_DELAY,
    SETTINGS_ENV_VAR,
)


class Settings:
    """Manages application settings"""

    DEFAULT_SETTINGS = {
        "graph": {
            "page_size": DEFAULT_PAGE_SIZE,  # Commits per listCommits page
            "palette_size": DEFAULT_PALETTE_SIZE,  # Lane colours before wrapping
        },
        "diff": {
            "context_lines": DEFAULT_CONTEXT_LINES,
            "refetch_delay": DEFAULT_REFETCH_DELAY,  # Seconds before re-fetch after a hunk action
            "word_diff": True,
        },
        "logging": {
            "format": "pretty",
            "level": "INFO",
        },
    }

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize settings"""
        if config_path is None:
            env_path = os.environ.get(SETTINGS_ENV_VAR)
            if env_path:
                config_path = Path(env_path)
            else:
                config_path = Path.home() / ".config" / "gitscope" / "settings.json"

        self.config_path = config_path
        self.settings = copy.deepcopy(self.DEFAULT_SETTINGS)
        self.load()

    def load(self) -> None:
        """Load settings from file"""
        if self.config_path.exists():
            with open(self.config_path) as f:
                loaded = json.load(f)
                # Merge with defaults to handle new settings
                self._merge_settings(self.settings, loaded)

    def save(self) -> None:
        """Save settings to file"""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w") as f:
            json.dump(self.settings, f, indent=2)

    def _merge_settings(self, base: dict[str, Any], updates: dict[str, Any]) -> None:
        """Recursively merge settings dictionaries"""
        for key, value in updates.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                base_dict: dict[str, Any] = base[key]
                value_dict: dict[str, Any] = value
                self._merge_settings(base_dict, value_dict)
            else:
                base[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get a setting by dot-separated path (e.g., 'graph.page_size')"""
        parts = path.split(".")
        value: Any = self.settings

        for part in parts:
            if isinstance(value, dict):
                value_dict: dict[str, Any] = value
                if part in value_dict:
                    value = value_dict[part]
                else:
                    return default
            else:
                return default

        return value

    def set(self, path: str, value: Any) -> None:
        """Set a setting by dot-separated path"""
        parts = path.split(".")
        target: Any = self.settings

        for part in parts[:-1]:
            if part not in target:
                target[part] = {}
            target = target[part]

        target[parts[-1]] = value

    def get_page_size(self) -> int:
        """Get how many commits to request per history page."""
        page_size: int = int(self.get("graph.page_size", DEFAULT_PAGE_SIZE))
        return max(1, page_size)

    def get_palette_size(self) -> int:
        """Get the number of lane colours.

        Colour indices are computed modulo this value, so changing it
        reshuffles every lane colour; keep it fixed for a session.
        """
        palette_size: int = int(self.get("graph.palette_size", DEFAULT_PALETTE_SIZE))
        return max(1, palette_size)

    def get_context_lines(self) -> int:
        context: int = int(self.get("diff.context_lines", DEFAULT_CONTEXT_LINES))
        return max(0, context)

    def get_refetch_delay(self) -> float:
        """Get the pause before re-fetching a file's diff after a hunk action."""
        delay: float = float(self.get("diff.refetch_delay", DEFAULT_REFETCH_DELAY))
        return max(0.0, delay)

    def word_diff_enabled(self) -> bool:
        return bool(self.get("diff.word_diff", True))
