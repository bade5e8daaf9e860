"""Configuration handling for cupslog."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed or found."""


DEFAULT_CONF_PATHS: list[Path] = [
    Path("/etc/cupslog/cupslog.conf"),
    Path("/etc/cupslog.conf"),
    Path.cwd() / "cupslog.conf",
]


def _bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _split_csv(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Config:
    page_log_path: Path = Path("/var/log/cups/page_log")
    fallback_log_path: Path = Path("./sample_cups.log")
    costs_config_path: Path = Path("./costs-config.json")
    watch: bool = True
    host: str = "0.0.0.0"
    port: int = 3001
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    source_file: Path | None = None


def discover_config_file(explicit_path: Path | None = None) -> Path | None:
    """Return the first readable configuration file, if any.

    An explicit path that does not exist is an error; the default search
    locations are optional.
    """

    if explicit_path:
        if explicit_path.is_file():
            return explicit_path
        raise ConfigError(f"Configuration file not found: {explicit_path}")

    env_path = os.getenv("CUPSLOG_CONFIG")
    candidates: Iterable[Path] = (
        [Path(env_path)] if env_path else DEFAULT_CONF_PATHS
    )
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    if env_path:
        raise ConfigError(f"Configuration file not found: {env_path}")
    return None


def read_raw(conf_path: Path) -> dict[str, str]:
    """Read ``section.key`` pairs from an INI-like file."""

    raw: dict[str, str] = {}
    current_section: str | None = None
    with conf_path.open("r", encoding="utf-8") as handle:
        for lineno, line in enumerate(handle, start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith(("#", ";")):
                continue

            if stripped.startswith("[") and stripped.endswith("]"):
                name = stripped[1:-1].strip().lower()
                current_section = name or None
                continue

            if "=" not in stripped:
                raise ConfigError(
                    f"Invalid config line {lineno} in {conf_path}: {line!r}"
                )
            key, value = stripped.split("=", 1)
            key = key.strip().lower()
            value = value.strip()

            # Keys before any section belong to [core].
            section = current_section or "core"
            raw[f"{section}.{key}"] = value
    return raw


def parse_config(path: Path | None = None) -> Config:
    """Load configuration from disk, then apply environment overrides."""

    config = Config()
    conf_path = discover_config_file(path)
    raw = read_raw(conf_path) if conf_path else {}
    config.source_file = conf_path

    try:
        _apply(config, raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid value in {conf_path}: {exc}") from exc
    _apply_env(config)
    return config


def _apply(config: Config, raw: dict[str, str]) -> None:
    mapping = {
        "core.page_log_path": ("page_log_path", Path),
        "core.fallback_log_path": ("fallback_log_path", Path),
        "core.costs_config_path": ("costs_config_path", Path),
        "core.watch": ("watch", _bool),
        "server.host": ("host", str),
        "server.port": ("port", int),
        "server.cors_origins": ("cors_origins", _split_csv),
        "logging.level": ("log_level", str.upper),
    }

    for key, (attr, caster) in mapping.items():
        if key in raw:
            setattr(config, attr, caster(raw[key]))


def _apply_env(config: Config) -> None:
    page_log = os.getenv("CUPSLOG_PAGE_LOG")
    if page_log:
        config.page_log_path = Path(page_log)
    host = os.getenv("CUPSLOG_HOST")
    if host:
        config.host = host
    port = os.getenv("CUPSLOG_PORT")
    if port:
        try:
            config.port = int(port)
        except ValueError as exc:
            raise ConfigError(f"Invalid CUPSLOG_PORT: {port!r}") from exc
