"""Settings file I/O for blame-split.

Manages a JSON settings file at XDG_CONFIG_HOME/blame-split/settings.json.
Unknown keys are preserved on write; known keys fall back to DEFAULTS.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

# [LAW:one-source-of-truth] All known settings and their defaults
DEFAULTS: dict[str, object] = {
    "gutter_width": 60,
    "palette_size": 16,
    "seed_hue": None,
}

MIN_GUTTER_WIDTH = 20
MAX_GUTTER_WIDTH = 200


def get_config_path() -> Path:
    """Return path to settings file.

    Uses XDG_CONFIG_HOME (default ~/.config) / blame-split / settings.json.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(config_home) / "blame-split" / "settings.json"


def load_settings() -> dict:
    """Load settings from JSON file. Returns empty dict on missing/corrupt file."""
    path = get_config_path()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("ignoring unreadable settings file %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_settings(data: dict) -> None:
    """Atomic write of settings dict to JSON file.

    Creates parent directories if needed. Writes to temp file then renames
    to avoid partial writes on crash.
    """
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.replace(tmp_path, path)
    except Exception:
        # Clean up temp file on failure
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def load_setting(key: str, default=None):
    """Load a single setting by key. Falls back to DEFAULTS, then default."""
    return load_settings().get(key, DEFAULTS.get(key, default))


def save_setting(key: str, value) -> None:
    """Save a single setting by key (merge into existing settings)."""
    data = load_settings()
    data[key] = value
    save_settings(data)


def clamp_gutter_width(width: int) -> int:
    return max(MIN_GUTTER_WIDTH, min(MAX_GUTTER_WIDTH, int(width)))


def load_gutter_width() -> int:
    try:
        return clamp_gutter_width(load_setting("gutter_width"))
    except (TypeError, ValueError):
        return int(DEFAULTS["gutter_width"])


def save_gutter_width(width: int) -> None:
    save_setting("gutter_width", clamp_gutter_width(width))
