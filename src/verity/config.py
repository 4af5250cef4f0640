"""
verity — reporter configuration

File: src/verity/config.py

Purpose
- Hold the immutable settings the failure reporter runs with: labels, frame
  filtering, stack depth bound, painting.
- Load them once from defaults, the ``[tool.verity]`` table of
  ``pyproject.toml`` and ``VERITY_`` environment variables.

Functional requirements
- Precedence: env > file > defaults.
- TOML loading via ``tomllib``; unknown keys and badly typed values are
  rejected with ``ConfigError``.
- The library's own package is always treated as internal, whatever the file
  adds.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Final

import structlog
from rich.errors import StyleError

from verity.callsite import FrameFilter
from verity.constants import (
    DEFAULT_DRIVER_MODULES,
    DEFAULT_ENTRY_PREFIXES,
    DEFAULT_INTERNAL_PACKAGES,
    DEFAULT_MAX_DEPTH,
    DEFAULT_PALETTE,
    LABEL_ERROR,
    LABEL_ERROR_TRACE,
    LABEL_MESSAGE,
    PAINT_ROLES,
)
from verity.errors import ConfigError
from verity.paint import Painter

logger = structlog.get_logger(__name__)

DEFAULT_CONFIG_FILE: Final[str] = "pyproject.toml"
ENV_PREFIX: Final[str] = "VERITY_"

_BOOLEAN_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_BOOLEAN_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})

_FILE_KEYS: Final[frozenset[str]] = frozenset(
    {"color", "max_depth", "internal_packages", "driver_modules", "entry_prefixes", "palette"}
)
_ENV_KEYS: Final[dict[str, str]] = {
    f"{ENV_PREFIX}COLOR": "color",
    f"{ENV_PREFIX}MAX_DEPTH": "max_depth",
    f"{ENV_PREFIX}INTERNAL_PACKAGES": "internal_packages",
    f"{ENV_PREFIX}DRIVER_MODULES": "driver_modules",
    f"{ENV_PREFIX}ENTRY_PREFIXES": "entry_prefixes",
}


@dataclass(frozen=True, slots=True)
class ReporterConfig:
    """Process-wide reporter settings; built once, never mutated."""

    label_error_trace: str = LABEL_ERROR_TRACE
    label_error: str = LABEL_ERROR
    label_message: str = LABEL_MESSAGE
    internal_packages: tuple[str, ...] = DEFAULT_INTERNAL_PACKAGES
    driver_modules: tuple[str, ...] = DEFAULT_DRIVER_MODULES
    entry_prefixes: tuple[str, ...] = DEFAULT_ENTRY_PREFIXES
    max_depth: int = DEFAULT_MAX_DEPTH
    color: bool = True
    palette: tuple[tuple[str, str], ...] = tuple(DEFAULT_PALETTE.items())

    def frame_filter(self) -> FrameFilter:
        return FrameFilter(
            internal_packages=self.internal_packages,
            driver_modules=self.driver_modules,
            entry_prefixes=self.entry_prefixes,
        )

    def painter(self) -> Painter:
        return Painter(dict(self.palette), enabled=self.color)


def load_config(
    config_path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> ReporterConfig:
    """Load effective config with deterministic precedence: env > file > defaults."""

    env_map = dict(os.environ if environ is None else environ)
    resolved_path = _resolve_config_path(config_path)
    file_payload = _load_tool_table(resolved_path, required=config_path is not None)

    config = _apply(ReporterConfig(), file_payload, source=str(resolved_path))
    config = _apply(config, _collect_env_overrides(env_map), source="environment")
    if "NO_COLOR" in env_map and f"{ENV_PREFIX}COLOR" not in env_map:
        config = replace(config, color=False)

    logger.debug(
        "config_loaded",
        path=str(resolved_path) if resolved_path is not None else None,
        color=config.color,
        max_depth=config.max_depth,
        internal_packages=list(config.internal_packages),
    )
    return config


def _resolve_config_path(config_path: str | Path | None) -> Path | None:
    if config_path is not None:
        return Path(config_path).expanduser()

    current = Path.cwd()
    for directory in (current, *current.parents):
        candidate = directory / DEFAULT_CONFIG_FILE
        if candidate.is_file():
            return candidate
    return None


def _load_tool_table(path: Path | None, *, required: bool) -> dict[str, Any]:
    if path is None:
        return {}
    if not path.is_file():
        if required:
            raise ConfigError(f"config file not found: {path}")
        return {}

    try:
        with path.open("rb") as handle:
            payload = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"failed to read {path}: {exc}") from exc

    table = payload.get("tool", {}).get("verity", {})
    if not isinstance(table, dict):
        raise ConfigError(f"[tool.verity] in {path} must be a table")

    unknown = sorted(set(table) - _FILE_KEYS)
    if unknown:
        raise ConfigError(f"unknown [tool.verity] keys in {path}: {', '.join(unknown)}")
    return table


def _collect_env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for env_key, field_name in _ENV_KEYS.items():
        raw = environ.get(env_key)
        if raw is None:
            continue
        if field_name == "color":
            overrides[field_name] = _coerce_bool(raw, env_key)
        elif field_name == "max_depth":
            overrides[field_name] = _coerce_int(raw, env_key)
        else:
            overrides[field_name] = [part.strip() for part in raw.split(",") if part.strip()]
    return overrides


def _apply(config: ReporterConfig, payload: Mapping[str, Any], *, source: str) -> ReporterConfig:
    if not payload:
        return config

    changes: dict[str, Any] = {}
    if "color" in payload:
        changes["color"] = _require_bool(payload["color"], "color", source)
    if "max_depth" in payload:
        depth = payload["max_depth"]
        if isinstance(depth, bool) or not isinstance(depth, int) or depth <= 0:
            raise ConfigError(f"max_depth from {source} must be a positive integer")
        changes["max_depth"] = depth
    if "internal_packages" in payload:
        extra = _require_names(payload["internal_packages"], "internal_packages", source)
        changes["internal_packages"] = tuple(dict.fromkeys((*DEFAULT_INTERNAL_PACKAGES, *extra)))
    for field_name in ("driver_modules", "entry_prefixes"):
        if field_name in payload:
            changes[field_name] = _require_names(payload[field_name], field_name, source)
    if "palette" in payload:
        changes["palette"] = _require_palette(payload["palette"], dict(config.palette), source)

    return replace(config, **changes)


def _require_bool(value: object, name: str, source: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{name} from {source} must be a boolean")
    return value


def _require_names(value: object, name: str, source: str) -> tuple[str, ...]:
    if not isinstance(value, list | tuple) or not all(
        isinstance(item, str) and item for item in value
    ):
        raise ConfigError(f"{name} from {source} must be a list of non-empty strings")
    return tuple(value)


def _require_palette(
    value: object, current: dict[str, str], source: str
) -> tuple[tuple[str, str], ...]:
    if not isinstance(value, dict):
        raise ConfigError(f"palette from {source} must be a table")

    palette = dict(current)
    for role, color in value.items():
        if role not in PAINT_ROLES:
            raise ConfigError(f"unknown palette role {role!r} from {source}")
        if not isinstance(color, str):
            raise ConfigError(f"palette color for {role!r} from {source} must be a string")
        try:
            Painter({role: color})
        except StyleError as exc:
            raise ConfigError(f"invalid palette color {color!r} for {role!r}: {exc}") from exc
        palette[role] = color
    return tuple(palette.items())


def _coerce_bool(raw: str, env_key: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _BOOLEAN_TRUE:
        return True
    if lowered in _BOOLEAN_FALSE:
        return False
    raise ConfigError(f"{env_key} must be a boolean, got {raw!r}")


def _coerce_int(raw: str, env_key: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"{env_key} must be an integer, got {raw!r}") from exc


__all__ = ["DEFAULT_CONFIG_FILE", "ENV_PREFIX", "ReporterConfig", "load_config"]
