"""
Environment Configuration Management Module

Centralised access to pullgen's configuration. Values are resolved from:

- Environment variables (including those loaded from ``.env`` files)
- The settings file (``settings.yaml``)
- Default values

Environment variables take precedence over the settings file, which takes
precedence over the defaults in ``DEFAULT_ENV``.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from pullgen.config.settings import get_value, load_settings
from pullgen.errors import ConfigurationError
from pullgen.types import FrameStrategy

DEFAULT_ENV = {
    "PULLGEN_JOIN_STRATEGY": FrameStrategy.EMBEDDED.value,
    "PULLGEN_BENCH_REPEAT": 1000,
}


def load_dotenv_files():
    """Load environment variables from .env files based on current environment."""
    from dotenv import load_dotenv

    env_name = os.environ.get("ENV", "development")

    # Later files override earlier ones
    env_files = [
        Path.cwd() / ".env",
        Path.cwd() / f".env.{env_name}",
        Path.cwd() / f".env.{env_name}.local",
    ]

    for env_file in env_files:
        if env_file.exists():
            load_dotenv(env_file, override=False)


class GeneratorSettings(BaseModel):
    """Validated view of the settings that shape generator behaviour."""

    join_strategy: FrameStrategy = FrameStrategy.EMBEDDED
    bench_repeat: int = Field(default=1000, ge=1)
    log_level: str = "INFO"


class Environment(object):
    """
    Manages configuration values and provides default values and type conversions.

    All accessors are classmethods; settings are loaded lazily on first use and
    cached until ``clear()`` is called.
    """

    settings: Optional[Dict[str, Any]] = None

    @classmethod
    def load_settings(cls):
        # Load .env files first
        load_dotenv_files()
        cls.settings = load_settings()

    @classmethod
    def get_settings(cls) -> Dict[str, Any]:
        if cls.settings is None:
            cls.load_settings()
        assert cls.settings is not None
        return cls.settings

    @classmethod
    def clear(cls):
        """Forget cached settings so the next access reloads them."""
        cls.settings = None

    @classmethod
    def get(cls, key: str, default: Any = None):
        return get_value(key, cls.get_settings(), DEFAULT_ENV, default)

    @classmethod
    def get_log_level(cls) -> str:
        """Return desired log level string.

        Priority:
        1) PULLGEN_LOG_LEVEL env
        2) If DEBUG env is truthy, return "DEBUG"
        3) "INFO"
        """
        level = os.getenv("PULLGEN_LOG_LEVEL")
        if level:
            return str(level).upper()
        debug_env = os.getenv("DEBUG")
        if debug_env and debug_env.lower() not in ("0", "false", "no", "off", ""):
            return "DEBUG"
        return "INFO"

    @classmethod
    def get_join_strategy(cls) -> FrameStrategy:
        """
        The frame strategy joins use when none is given explicitly.
        """
        raw = str(cls.get("PULLGEN_JOIN_STRATEGY")).strip().lower()
        try:
            return FrameStrategy(raw)
        except ValueError as e:
            raise ConfigurationError(
                f"PULLGEN_JOIN_STRATEGY must be one of {FrameStrategy.list_values()}, got {raw!r}"
            ) from e

    @classmethod
    def _get_int_setting(cls, key: str, default: int) -> int:
        value = os.environ.get(key)
        if value is not None:
            try:
                return int(value)
            except ValueError:
                return default
        raw = cls.get_settings().get(key)
        if raw is None:
            return default
        try:
            return int(raw)
        except (TypeError, ValueError):
            return default

    @classmethod
    def get_bench_repeat(cls) -> int:
        """
        Runs per benchmark measurement.

        Raises:
            ConfigurationError: if the configured value is not positive.
        """
        repeat = cls._get_int_setting("PULLGEN_BENCH_REPEAT", DEFAULT_ENV["PULLGEN_BENCH_REPEAT"])
        if repeat < 1:
            raise ConfigurationError(f"PULLGEN_BENCH_REPEAT must be at least 1, got {repeat}")
        return repeat

    @classmethod
    def get_generator_settings(cls) -> GeneratorSettings:
        """
        Resolve and validate all generator settings at once.
        """
        try:
            return GeneratorSettings(
                join_strategy=cls.get_join_strategy(),
                bench_repeat=cls.get_bench_repeat(),
                log_level=cls.get_log_level(),
            )
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e
