"""
Utilities for loading and querying dsc-helpgen settings.

Settings are read from an optional ``settings.json`` located adjacent to
this file and fall back to ``DEFAULT_CONFIG``. Resource search paths and
the message culture come from the environment (which the CLI seeds from a
``.env`` file).
"""

# --- Imports ---
import json
import logging
import os
from pathlib import Path
from typing import List

# --- Module-level Constants ---
# Settings file is expected to be adjacent to this file
CONFIG_PATH = Path(__file__).parent / "settings.json"

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "target_functions": [
        "Get-TargetResource",
        "Test-TargetResource",
        "Set-TargetResource",
    ],
    "module_suffix": ".psm1",
    "schema_suffix": ".schema.mof",
    "culture": "en-US",
    "output_dir": "help_output",
}

# --- Helper Functions ---


def load_config() -> dict:
    """
    Load configuration from settings.json, merged over the defaults.
    """
    if not CONFIG_PATH.exists():
        return dict(DEFAULT_CONFIG)

    try:
        with open(CONFIG_PATH, "r", encoding="utf-8") as f:
            return {**DEFAULT_CONFIG, **json.load(f)}
    except Exception as e:
        # Log the error and fall back to defaults
        logger.error("Error loading configuration: %s", e)
        return dict(DEFAULT_CONFIG)


def get_target_functions() -> List[str]:
    """
    Return the default set of lifecycle functions to document.

    Returns
    -------
    list of str
        Function names in the order they are searched for.
    """
    return list(load_config()["target_functions"])


def get_suffixes() -> tuple:
    """Return ``(module_suffix, schema_suffix)``."""
    config = load_config()
    return config["module_suffix"], config["schema_suffix"]


def get_culture() -> str:
    """
    Return the culture used for messages.

    The ``DSC_HELPGEN_CULTURE`` environment variable wins over the settings
    file.
    """
    return os.getenv("DSC_HELPGEN_CULTURE") or load_config()["culture"]


def get_search_paths() -> List[str]:
    """
    Return the directories the resource catalog searches.

    Parameters
    ----------
    None

    Returns
    -------
    list of str
        Entries of ``DSC_RESOURCE_PATH`` if set, otherwise of
        ``PSModulePath``, split on ``os.pathsep``. Empty entries are
        dropped; an empty list means the catalog has nowhere to look.
    """
    raw = os.getenv("DSC_RESOURCE_PATH") or os.getenv("PSModulePath") or ""
    return [entry for entry in raw.split(os.pathsep) if entry.strip()]
