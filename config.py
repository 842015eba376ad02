from __future__ import annotations
import logging
import os
from dataclasses import dataclass, fields
from functools import lru_cache
from typing import Mapping, Optional

logger = logging.getLogger("ktsd.config")

STRATEGIES = ("hash", "sort")
ENV_PREFIX = "KTSD_"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def interpret_var_str(name: str, value: str) -> str:
    """Normalise a setting read from an environment variable."""
    value = value.strip()
    if name == "strategy":
        return value.lower()
    if name == "log_level":
        return value.upper()
    raise NotImplementedError(f"Don't know how to interpret setting {name}")


@dataclass(frozen=True)
class Settings:
    """Process-wide defaults, overridable through ``KTSD_*`` environment variables."""

    strategy: str = "hash"
    """ Relabeling strategy used when a measurer is built without one. ``KTSD_STRATEGY``. """

    log_level: str = "WARNING"
    """ Level the command line configures logging with. ``KTSD_LOG_LEVEL``. """

    def __post_init__(self):
        if self.strategy not in STRATEGIES:
            raise ValueError(f"strategy must be one of {STRATEGIES}, got {self.strategy!r}")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}, got {self.log_level!r}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        if environ is None:
            environ = os.environ
        values = {}
        for f in fields(cls):
            key = ENV_PREFIX + f.name.upper()
            if key in environ:
                values[f.name] = interpret_var_str(f.name, environ[key])
                logger.debug(f"{key} sets {f.name} = {values[f.name]!r}")
        return cls(**values)


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    return Settings.from_env()


__all__ = ["Settings", "get_settings", "STRATEGIES"]
