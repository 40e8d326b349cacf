"""
Configuration paths and storage keys.
"""
from __future__ import annotations

import os


APP_NAME: str = "texflow"
CONFIG_DIR_NAME: str = ".texflow"
VERSION: str = "0.1.0"

ENV_HOME: str = f"{APP_NAME.upper()}_HOME"

# Versioned store keys; a format change adds a new key and old ones are ignored
RULES_KEY: str = "texflow_rules_source_v4"
KEYBINDINGS_KEY: str = "texflow_keybindings_v1"


# ============================================================================
# User Config Paths (~/.texflow/*)
# ============================================================================


def get_config_dir() -> str:
    """Get the config directory (e.g., ~/.texflow/)."""
    env_dir = os.environ.get(ENV_HOME)
    if env_dir:
        home = os.path.expanduser("~")
        if env_dir == "~":
            return home
        if env_dir.startswith("~/"):
            return home + env_dir[1:]
        return env_dir
    return os.path.join(os.path.expanduser("~"), CONFIG_DIR_NAME)


def get_store_path() -> str:
    """Get path to store.json."""
    return os.path.join(get_config_dir(), "store.json")
