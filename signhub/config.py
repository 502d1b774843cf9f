"""
Configuration loader for signhub.

Loads settings from config.json with sensible defaults.
Screen visibility is not configured here: it arrives with each dataset.
"""

import json
import os
from typing import Any, Dict


# Default configuration
DEFAULT_CONFIG = {
    "data_service": {
        "url": "http://localhost:3001",
        "timeout": 10
    },
    "scheduler": {
        "mode": "rotation",
        "default_display_duration": 10,
        "poll_interval": 30,
        "retry_delay": 5
    },
    "marquee": {
        "pause": 6.0,
        "step_duration": 0.8,
        "fade_out": 0.3,
        "fade_in": 0.5,
        "fallback_row_height": 296,
        "row_gap": 16
    },
    "transitions": {
        "exit_duration": 0.5,
        "entrance_duration": 0.8,
        "overlap": 0.2
    },
    "display": {
        "width": 1920,
        "height": 1080,
        "notices_viewport": {
            "width": 860,
            "height": 820
        },
        "font_path": None,
        "font_size": 22,
        "output_dir": "output"
    }
}


class Config:
    """
    Configuration manager for signhub.

    Loads config.json from project root, falling back to defaults.
    """

    def __init__(self, config_path: str = "config.json"):
        """
        Initialize configuration.

        Args:
            config_path: Path to config file (default: config.json in current directory)
        """
        self.config_path = config_path
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """
        Load configuration from file or use defaults.

        Returns:
            Configuration dictionary
        """
        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, 'r') as f:
                    return json.load(f)
            except (json.JSONDecodeError, IOError) as e:
                print(f"Warning: Could not load {self.config_path}: {e}")
                print("Using default configuration")
                return DEFAULT_CONFIG.copy()
        else:
            # Config file doesn't exist, use defaults
            return DEFAULT_CONFIG.copy()

    def get(self, *keys: str, default: Any = None) -> Any:
        """
        Get nested config value.

        Args:
            *keys: Nested keys to traverse (e.g., "display", "notices_viewport", "height")
            default: Default value if key not found

        Returns:
            Config value or default

        Example:
            config.get("scheduler", "poll_interval")
            # Returns: 30
        """
        value = self.config
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def _section(self, name: str) -> Dict[str, Any]:
        """Section from config.json layered over its defaults."""
        merged = dict(DEFAULT_CONFIG.get(name, {}))
        merged.update(self.get(name, default={}) or {})
        return merged

    def get_data_service_config(self) -> Dict[str, Any]:
        """
        Get data service configuration.

        Returns:
            Dictionary with url and timeout (seconds)
        """
        return self._section("data_service")

    def get_scheduler_config(self) -> Dict[str, Any]:
        """
        Get scheduler configuration.

        Returns:
            Scheduler configuration dictionary with mode, default_display_duration,
            poll_interval and retry_delay
        """
        return self._section("scheduler")

    def get_marquee_config(self) -> Dict[str, Any]:
        """
        Get marquee timing configuration.

        Returns:
            Dictionary with pause, step_duration, fade_out, fade_in,
            fallback_row_height and row_gap
        """
        return self._section("marquee")

    def get_transition_config(self) -> Dict[str, Any]:
        """
        Get screen transition timing.

        Returns:
            Dictionary with exit_duration, entrance_duration and overlap
        """
        return self._section("transitions")

    def get_display_config(self) -> Dict[str, Any]:
        """
        Get display configuration.

        Returns:
            Display configuration dictionary with width, height, notices_viewport,
            font_path, font_size and output_dir
        """
        return self._section("display")


# Global config instance
_config = None


def get_config(config_path: str = None) -> Config:
    """
    Get global configuration instance.

    Lazy-loads configuration on first access. Passing a path reloads
    from that file.

    Returns:
        Config instance
    """
    global _config
    if _config is None or config_path is not None:
        _config = Config(config_path or "config.json")
    return _config
