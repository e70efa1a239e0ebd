"""Read .patchwise.toml, then layer PATCHWISE_* environment overrides on top."""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomllib  # type: ignore[import-not-found]
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[no-redef]

from patchwise.config.schema import (
    OUTPUT_FORMATS,
    ApplyConfig,
    OutputConfig,
    PatchwiseConfig,
)

CONFIG_FILE_NAME = ".patchwise.toml"


class ConfigError(Exception):
    """Raised when config is malformed or unreadable."""


def find_config_file(root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Return the explicit *override* path, else ``root/.patchwise.toml`` if present."""
    if override:
        explicit = Path(override)
        if not explicit.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return explicit
    candidate = root / CONFIG_FILE_NAME
    return candidate if candidate.is_file() else None


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _non_negative_int(raw: str) -> Optional[int]:
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value >= 0 else None


def _output_format(raw: str) -> Optional[str]:
    return raw if raw in OUTPUT_FORMATS else None


def _flag(raw: str) -> Optional[bool]:
    return True if raw == "1" else None


# env var -> (section, field, converter); a converter returning None drops the value
ENV_OVERRIDES: Dict[str, Tuple[str, str, Callable[[str], Any]]] = {
    "PATCHWISE_FUZZ_THRESHOLD": ("apply", "fuzz_threshold", _non_negative_int),
    "PATCHWISE_FAIL_ON_FUZZ": ("apply", "fail_on_fuzz", _flag),
    "PATCHWISE_ENCODING": ("apply", "encoding", str),
    "PATCHWISE_FORMAT": ("output", "format", _output_format),
}


def _apply_env_overrides(cfg: PatchwiseConfig) -> None:
    for name, (section, attr, convert) in ENV_OVERRIDES.items():
        raw = os.environ.get(name)
        if not raw:
            continue
        value = convert(raw)
        if value is not None:
            setattr(getattr(cfg, section), attr, value)


def _from_table(raw: Dict[str, Any], section: str, cls: type):
    """Instantiate *cls* from ``[section]``; keys it does not declare are dropped."""
    table = raw.get(section, {})
    if not isinstance(table, dict):
        raise ConfigError(f"[{section}] must be a table")
    known = {f.name for f in dataclasses.fields(cls)}
    return cls(**{key: value for key, value in table.items() if key in known})


def _check(cfg: PatchwiseConfig) -> None:
    if cfg.output.format not in OUTPUT_FORMATS:
        raise ConfigError(f"Invalid output format: {cfg.output.format}")
    threshold = cfg.apply.fuzz_threshold
    # bool is an int subclass; `fuzz_threshold = true` is still a typo
    if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold < 0:
        raise ConfigError(f"Invalid fuzz_threshold: {threshold!r}")


def load_config(
    root: Path,
    config_override: Optional[str] = None,
) -> PatchwiseConfig:
    """Load, validate, and return a PatchwiseConfig."""
    path = find_config_file(root, config_override)

    cfg = PatchwiseConfig()
    if path is not None:
        raw = _read_toml(path)
        cfg = PatchwiseConfig(
            version=str(raw.get("version", cfg.version)),
            apply=_from_table(raw, "apply", ApplyConfig),
            output=_from_table(raw, "output", OutputConfig),
        )
        _check(cfg)

    _apply_env_overrides(cfg)
    return cfg
