"""
Configuration — loads settings from .ghostpatch.yaml, environment variables,
and built-in defaults (in that priority order: CLI args > env > YAML > defaults).
"""

import os

import yaml

from .errors import ConfigError


# Operations whose old lines are at most this many lines apart share a group.
DEFAULT_GROUP_MAX_GAP = 3

_DEFAULTS = {
    "group_max_gap": DEFAULT_GROUP_MAX_GAP,
    "tab_width": 4,
    "diff_context_lines": 3,
    "fallback_max_search_chars": 2000,
    "fallback_max_content_chars": 500_000,
    "preserve_trailing_newline": True,
    "metrics_enabled": False,
    "metrics_dir": ".ghostpatch",
}

# Config file search locations
_CONFIG_FILENAMES = [".ghostpatch.yaml", ".ghostpatch.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


class Config:
    """Engine configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. Environment variables (``GHOSTPATCH_*``)
    3. .ghostpatch.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(env_key: str, yaml_key: str, default, cast=str):
            env_val = os.getenv(env_key)
            raw = env_val if env_val is not None else yd.get(yaml_key)
            if raw is None:
                return default
            try:
                return cast(raw)
            except (TypeError, ValueError):
                raise ConfigError(
                    f"Invalid value for {yaml_key}: {raw!r}", key=yaml_key,
                ) from None

        def _get_bool(env_key: str, yaml_key: str, default: bool) -> bool:
            env_val = os.getenv(env_key)
            if env_val is not None:
                return env_val.lower() == "true"
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return bool(yaml_val)
            return default

        self.GROUP_MAX_GAP = _get("GHOSTPATCH_GROUP_MAX_GAP", "group_max_gap",
                                  _DEFAULTS["group_max_gap"], cast=int)
        self.TAB_WIDTH = _get("GHOSTPATCH_TAB_WIDTH", "tab_width",
                              _DEFAULTS["tab_width"], cast=int)
        self.DIFF_CONTEXT_LINES = _get("GHOSTPATCH_DIFF_CONTEXT_LINES",
                                       "diff_context_lines",
                                       _DEFAULTS["diff_context_lines"], cast=int)

        # Bounds for the regex fallback steps of the locator
        self.FALLBACK_MAX_SEARCH_CHARS = _get(
            "GHOSTPATCH_FALLBACK_MAX_SEARCH_CHARS", "fallback_max_search_chars",
            _DEFAULTS["fallback_max_search_chars"], cast=int)
        self.FALLBACK_MAX_CONTENT_CHARS = _get(
            "GHOSTPATCH_FALLBACK_MAX_CONTENT_CHARS", "fallback_max_content_chars",
            _DEFAULTS["fallback_max_content_chars"], cast=int)

        self.PRESERVE_TRAILING_NEWLINE = _get_bool(
            "GHOSTPATCH_PRESERVE_TRAILING_NEWLINE", "preserve_trailing_newline",
            _DEFAULTS["preserve_trailing_newline"])

        # Suggestion metrics log
        self.METRICS_ENABLED = _get_bool("GHOSTPATCH_METRICS_ENABLED",
                                         "metrics_enabled",
                                         _DEFAULTS["metrics_enabled"])
        self.METRICS_DIR = _get("GHOSTPATCH_METRICS_DIR", "metrics_dir",
                                _DEFAULTS["metrics_dir"])

        if self.GROUP_MAX_GAP < 0:
            raise ConfigError("group_max_gap must be >= 0", key="group_max_gap")
        if self.TAB_WIDTH < 1:
            raise ConfigError("tab_width must be >= 1", key="tab_width")
        if self.DIFF_CONTEXT_LINES < 0:
            raise ConfigError("diff_context_lines must be >= 0",
                              key="diff_context_lines")

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
