"""
ClassLens Configuration Management
===================================

Centralized configuration using Python dataclasses and TOML-based
persistence.

Example ``config.toml``::

    [global]
    log_level = "DEBUG"
    log_file = "classlens.log"
    log_json = true

    [classpath]
    separator = ":"
    entries = ["/opt/lib/runtime.jar"]

References:
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "config.toml"


@dataclass(frozen=False, slots=True)
class ClasspathConfig:
    """Classpath parsing and lookup settings.

    ``entries`` are appended after any classpath given on the command
    line or programmatically, so they have the lowest precedence.
    """

    separator: str = os.pathsep
    entries: list[str] = field(default_factory=list)


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Logging and output settings."""

    log_level: str = "WARNING"
    log_file: str | None = None
    log_json: bool = False
    version: str = "0.1.0"


@dataclass(frozen=False, slots=True)
class LensConfig:
    """Master configuration.

    Usage:
        >>> config = LensConfig.load()                  # default path
        >>> config = LensConfig.load("custom.toml")     # custom path
        >>> config.classpath.separator
        ':'
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    classpath: ClasspathConfig = field(default_factory=ClasspathConfig)

    @classmethod
    def load(cls, path: str | Path | None = None) -> LensConfig:
        """Load configuration from a TOML file.

        If *path* is ``None`` the loader looks for ``config.toml`` in the
        project root and falls back to defaults when it is absent.
        Missing keys fall back to dataclass defaults.

        Raises:
            FileNotFoundError: If an explicitly given *path* does not exist.
        """
        config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}"
                )
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        return cls(
            global_settings=cls._build_section(GlobalConfig, raw.get("global", {})),
            classpath=cls._build_section(ClasspathConfig, raw.get("classpath", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @staticmethod
    def _build_section(cls: type, data: dict[str, Any]) -> Any:
        """Instantiate a dataclass *cls* using only the keys it declares."""
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)


def get_config(path: str | Path | None = None) -> LensConfig:
    """Cached wrapper around :meth:`LensConfig.load`."""
    if not hasattr(get_config, "_cached") or path is not None:
        get_config._cached = LensConfig.load(path)  # type: ignore[attr-defined]
    return get_config._cached  # type: ignore[attr-defined]
