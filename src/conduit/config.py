# Conduit - Client Configuration
# Copyright (C) 2025 maigre - Hemisphere Project
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""Client-side preferences (engine URL, debounce windows, window size).

Bridge settings and mappings belong to the engine and are never stored here.
"""

import copy
import json
import os
import sys
from pathlib import Path

from .exceptions import ConfigError

DEFAULT_CONFIG = {
    "engine_url": "ws://127.0.0.1:9870",
    "call_timeout_s": 5.0,
    "mapping_debounce_ms": 300,
    "settings_debounce_ms": 500,
    "log_capacity": 500,
    "window_size": [1000, 720],
}


def get_config_path():
    """Get platform-appropriate config file path

    Returns path to config.json in:
    - macOS: ~/Library/Application Support/Conduit/config.json
    - Linux: ~/.config/conduit/config.json
    - Windows: %APPDATA%/Conduit/config.json
    - Fallback: ./config.json (current directory)
    """
    try:
        if sys.platform == "darwin":
            config_dir = Path.home() / "Library" / "Application Support" / "Conduit"
        elif sys.platform.startswith("linux"):
            config_dir = Path.home() / ".config" / "conduit"
        elif sys.platform == "win32":
            appdata = os.environ.get("APPDATA")
            config_dir = Path(appdata) / "Conduit" if appdata else Path(".")
        else:
            config_dir = Path(".")
    except RuntimeError:
        # Path.home() fails when no home directory can be resolved
        config_dir = Path(".")

    return config_dir / "config.json"


def get_default_config():
    """Return default configuration"""
    return copy.deepcopy(DEFAULT_CONFIG)


def load_config(path=None):
    """Load configuration, filling in defaults for missing keys.

    A missing file is created with the defaults. An unreadable file is
    reported on the console and the defaults are used instead.
    """
    path = Path(path) if path else get_config_path()
    config = get_default_config()

    if not path.exists():
        print("No config file found, creating with defaults")
        try:
            save_config(config, path)
            print(f"Default config saved to {path}")
        except ConfigError as e:
            print(f"Could not save default config: {e}")
        return config

    try:
        with open(path, "r", encoding="utf-8") as f:
            loaded = json.load(f)
    except (OSError, ValueError) as e:
        print(f"Error loading config: {e}, using defaults")
        return config

    if not isinstance(loaded, dict):
        print(f"Error loading config: expected an object in {path}, using defaults")
        return config

    for key, value in loaded.items():
        config[key] = value
    print(f"Config loaded from {path}")
    return config


def save_config(config, path=None):
    """Save configuration to config.json"""
    path = Path(path) if path else get_config_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
    except OSError as e:
        raise ConfigError(f"Could not write {path}: {e}") from e
