"""Configuration for catalogkit tooling.

Values come from keyword arguments or from environment variables::

    CATALOGKIT_USE_FUZZY=true
    CATALOGKIT_ENCODING=utf-8
    CATALOGKIT_BYTEORDER=big
    CATALOGKIT_LOG_LEVEL=debug     # or a number such as 10
"""

from __future__ import annotations

import codecs
import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Mapping

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Codec names such as "437" stay strings
_TEXT_FIELDS = frozenset({"encoding", "byteorder"})


def _parse_value(value: str) -> Any:
    """Parse string value to appropriate type."""
    if value.lower() in ("true", "yes", "1", "on"):
        return True
    if value.lower() in ("false", "no", "0", "off"):
        return False
    if value.lower() in ("null", "none", ""):
        return None
    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        pass
    return value


@dataclass
class CatalogConfig:
    """Settings for reading PO files and writing binary catalogs.

    Attributes:
        use_fuzzy: Include entries flagged ``fuzzy`` when compiling.
        encoding: PO file encoding and binary catalog string encoding.
        byteorder: Byte order of written binary catalogs.
        log_level: Logging level name or number for the command-line tools.
    """

    use_fuzzy: bool = False
    encoding: str = "utf-8"
    byteorder: str = "little"
    log_level: str | int = "WARNING"

    @classmethod
    def from_env(
        cls,
        prefix: str = "CATALOGKIT",
        environ: Mapping[str, str] | None = None,
    ) -> "CatalogConfig":
        """Create configuration from environment variables.

        Raises:
            ValueError: If a value is invalid.
        """
        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for f in fields(cls):
            key = f"{prefix}_{f.name.upper()}"
            if key in environ:
                value = _parse_value(environ[key])
                is_number = isinstance(value, (int, float)) and not isinstance(value, bool)
                if is_number and f.name in _TEXT_FIELDS:
                    value = environ[key]
                if value is not None:
                    values[f.name] = value

        config = cls(**values)
        errors = config.validate()
        if errors:
            raise ValueError("Invalid configuration: " + "; ".join(errors))
        return config

    def validate(self) -> list[str]:
        """Validate configuration.

        Returns:
            List of validation errors (empty if valid).
        """
        errors: list[str] = []
        if not isinstance(self.use_fuzzy, bool):
            errors.append(f"use_fuzzy must be a boolean, got {self.use_fuzzy!r}")
        if self.byteorder not in ("little", "big"):
            errors.append(f"byteorder must be 'little' or 'big', got {self.byteorder!r}")
        try:
            codecs.lookup(str(self.encoding))
        except LookupError:
            errors.append(f"unknown encoding {self.encoding!r}")
        if isinstance(self.log_level, bool) or (
            not isinstance(self.log_level, int) and str(self.log_level).upper() not in LOG_LEVELS
        ):
            errors.append(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}")
        return errors

    def configure_logging(self) -> None:
        """Configure root logging for command-line use."""
        level = self.log_level
        if not isinstance(level, int):
            level = getattr(logging, str(level).upper())
        logging.basicConfig(
            level=level,
            format="%(levelname)s %(name)s: %(message)s",
        )
