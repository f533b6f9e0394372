"""Utility functions for reading and writing configuration files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml

from pullgen.config.configuration import register_setting
from pullgen.types import FrameStrategy

# Constants
SETTINGS_FILE = "settings.yaml"
MISSING_MESSAGE = "Missing required environment variable: {}"
NOT_GIVEN = object()

# Built-in settings are registered here so that other packages can extend the
# configuration system via :func:`register_setting`.

register_setting(
    env_var="PULLGEN_JOIN_STRATEGY",
    group="Generators",
    description=(
        "Default frame strategy for joined generators. 'embedded' allocates one slot "
        "per child up front; 'dynamic' allocates a slot on a child's first launch and "
        "releases it once the child is done."
    ),
    choices=FrameStrategy.list_values(),
)
register_setting(
    env_var="PULLGEN_LOG_LEVEL",
    group="Logging",
    description="Log level for pullgen loggers (DEBUG, INFO, WARNING, ERROR).",
)
register_setting(
    env_var="PULLGEN_BENCH_REPEAT",
    group="Benchmarks",
    description="Default number of repetitions for each `pullgen bench` measurement.",
)


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def get_system_file_path(filename: str) -> Path:
    """Return the path to the configuration file for the current OS."""
    import platform

    os_name = platform.system()
    if os_name in {"Linux", "Darwin"}:
        return Path.home() / ".config" / "pullgen" / filename
    elif os_name == "Windows":
        appdata = os.getenv("APPDATA")
        if appdata is not None:
            return Path(appdata) / "pullgen" / filename
        return Path("data") / filename
    return Path("data") / filename


# ---------------------------------------------------------------------------
# Settings helpers
# ---------------------------------------------------------------------------


def load_settings() -> Dict[str, Any]:
    """Load settings from the YAML settings file."""
    settings_file = get_system_file_path(SETTINGS_FILE)

    settings: Dict[str, Any] = {}

    if settings_file.exists():
        with open(settings_file, "r") as f:
            settings = yaml.safe_load(f) or {}

    return settings


def save_settings(settings: Dict[str, Any]) -> None:
    """Save settings to the YAML settings file."""
    settings_file = get_system_file_path(SETTINGS_FILE)

    os.makedirs(os.path.dirname(settings_file), exist_ok=True)

    with open(settings_file, "w") as f:
        yaml.dump(settings, f)


def get_value(
    key: str,
    settings: Dict[str, Any],
    default_env: Dict[str, Any],
    default: Any = NOT_GIVEN,
) -> Any:
    """Retrieve a configuration value from environment, settings, or defaults."""
    value = os.environ.get(key)
    if value is None or str(value) == "":
        value = settings.get(key)

    if value is None:
        value = default_env.get(key, default)

    if value is not NOT_GIVEN:
        return value
    raise KeyError(MISSING_MESSAGE.format(key))
