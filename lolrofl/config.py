"""Runtime settings resolved from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

ENV_JOBS = "LOLROFL_JOBS"
ENV_LOG_LEVEL = "LOLROFL_LOG_LEVEL"
ENV_DEBUG_LOG = "LOLROFL_DEBUG_LOG"
ENV_OUT_DIR = "LOLROFL_OUT_DIR"

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


@dataclass(frozen=True)
class Settings:
    """Options shared by the command line entry points."""

    jobs: int = 1
    log_level: int = logging.WARNING
    debug_log: Optional[Path] = None
    out_dir: Path = Path(".")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        debug_log = env.get(ENV_DEBUG_LOG)
        return cls(
            jobs=parse_jobs(env.get(ENV_JOBS, "1"), source=ENV_JOBS),
            log_level=parse_log_level(env.get(ENV_LOG_LEVEL, "WARNING"), source=ENV_LOG_LEVEL),
            debug_log=Path(debug_log) if debug_log else None,
            out_dir=Path(env.get(ENV_OUT_DIR, ".")),
        )

    def with_overrides(self, **changes: object) -> "Settings":
        """Return a copy where every non-``None`` keyword replaces the current value."""

        return replace(self, **{key: value for key, value in changes.items() if value is not None})


def parse_jobs(value: str, *, source: str = "jobs") -> int:
    try:
        jobs = int(value)
    except ValueError:
        raise ValueError(f"{source} must be an integer, got {value!r}") from None
    if jobs < 1:
        raise ValueError(f"{source} must be at least 1, got {jobs}")
    return jobs


def parse_log_level(value: str, *, source: str = "log level") -> int:
    level = _LEVELS.get(value.strip().upper())
    if level is None:
        raise ValueError(f"{source} must be one of {', '.join(_LEVELS)}, got {value!r}")
    return level


__all__ = [
    "ENV_JOBS",
    "ENV_LOG_LEVEL",
    "ENV_DEBUG_LOG",
    "ENV_OUT_DIR",
    "Settings",
    "parse_jobs",
    "parse_log_level",
]
