"""Settings read from the environment (and a ``.env`` file, if present)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .result import Err, Ok, Result

FORMATS = ("text", "markdown", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    log_level: str = "WARNING"
    output_format: str = "text"

    @classmethod
    def from_env(cls) -> Result["Settings", ValueError]:
        """Read CONDEX_LOG_LEVEL and CONDEX_FORMAT."""
        load_dotenv()
        log_level = os.getenv("CONDEX_LOG_LEVEL", "WARNING").strip().upper()
        output_format = os.getenv("CONDEX_FORMAT", "text").strip().lower()

        if log_level not in LOG_LEVELS:
            return Err(ValueError(f"CONDEX_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}"))
        if output_format not in FORMATS:
            return Err(ValueError(f"CONDEX_FORMAT must be one of {', '.join(FORMATS)}, got {output_format!r}"))
        return Ok(cls(log_level=log_level, output_format=output_format))


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(levelname)s %(name)s: %(message)s",
    )
