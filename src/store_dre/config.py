# Store DRE - Store-level financial consolidation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for Store DRE.

This module is responsible for:
- loading the application configuration from a TOML file,
- resolving the snapshot CSV paths relative to that file,
- exposing typed dataclasses used by the rest of the application.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import tomllib  # Python 3.11+

from .service import DEFAULT_CACHE_SIZE

DEFAULT_CONFIG_FILE = "store_dre_config.toml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class SnapshotConfig:
    """
    Location of the CSV files holding the reporting snapshot.

    ``stores``, ``movement_types`` and ``closings`` are mandatory.
    ``movements``, ``payment_methods`` and ``goals`` are optional; when
    absent, closings have no movements and the catalogs are empty.
    """

    stores: Path
    movement_types: Path
    closings: Path
    movements: Optional[Path] = None
    payment_methods: Optional[Path] = None
    goals: Optional[Path] = None


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for Store DRE.

    This aggregates:
    - the snapshot file locations,
    - reporting options (default store filter, memoization size),
    - display options for tables,
    - the logging level.
    """

    snapshot: SnapshotConfig
    default_store: Optional[str]
    cache_size: int
    decimals: int
    currency: str
    log_level: str


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    """Return a TOML table, or an empty mapping when absent or malformed."""
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _parse_snapshot_config(
    snapshot_section: Mapping[str, Any],
    base_dir: Path,
) -> SnapshotConfig:
    """
    Extract and validate the [snapshot] table.

    Args:
        snapshot_section: Parsed [snapshot] table.
        base_dir: Directory used to resolve relative paths.

    Returns:
        A SnapshotConfig instance.

    Raises:
        ValueError: if a mandatory path is missing.
    """

    def _resolve_optional(rel: Optional[str]) -> Optional[Path]:
        if not rel:
            return None
        return (base_dir / str(rel)).resolve()

    missing = [
        key
        for key in ("stores", "movement_types", "closings")
        if not snapshot_section.get(key)
    ]
    if missing:
        raise ValueError(
            "Config file is missing [snapshot] paths: " + ", ".join(missing) + "."
        )

    return SnapshotConfig(
        stores=(base_dir / str(snapshot_section["stores"])).resolve(),
        movement_types=(base_dir / str(snapshot_section["movement_types"])).resolve(),
        closings=(base_dir / str(snapshot_section["closings"])).resolve(),
        movements=_resolve_optional(snapshot_section.get("movements")),
        payment_methods=_resolve_optional(snapshot_section.get("payment_methods")),
        goals=_resolve_optional(snapshot_section.get("goals")),
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the Store DRE application configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [snapshot]
        CSV files holding the records to report on: stores, movement_types,
        closings (mandatory) and movements, payment_methods, goals
        (optional).

    [reporting]
        default_store : optional store id used when no --store is given.
        cache_size    : maximum number of memoized reports (default 128).

    [display]
        decimals : rounding applied to amounts in tables (default 2).
        currency : currency code shown in headers (default "BRL").

    [logging]
        level : standard logging level name (default "WARNING").

    All file paths in the TOML are resolved relative to the directory of
    the TOML file itself.

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML configuration file. Defaults to
        ``store_dre_config.toml`` in the current directory.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) Snapshot paths
    snapshot = _parse_snapshot_config(_section(raw, "snapshot"), base_dir)

    # 2) Reporting options
    reporting_section = _section(raw, "reporting")

    default_store_raw = reporting_section.get("default_store")
    default_store = str(default_store_raw) if default_store_raw else None

    try:
        cache_size = int(reporting_section.get("cache_size", DEFAULT_CACHE_SIZE))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'reporting.cache_size' in the configuration. "
            "Expected an integer."
        ) from exc
    if cache_size < 0:
        raise ValueError("'reporting.cache_size' cannot be negative.")

    # 3) Display options
    display_section = _section(raw, "display")

    try:
        decimals = int(display_section.get("decimals", 2))
    except (TypeError, ValueError):
        decimals = 2
    currency = str(display_section.get("currency") or "BRL")

    # 4) Logging
    logging_section = _section(raw, "logging")
    log_level = str(logging_section.get("level", "WARNING")).upper()
    if log_level not in _LOG_LEVELS:
        raise ValueError(
            f"Invalid logging level {log_level!r}. "
            f"Expected one of: {', '.join(_LOG_LEVELS)}."
        )

    return AppConfig(
        snapshot=snapshot,
        default_store=default_store,
        cache_size=cache_size,
        decimals=decimals,
        currency=currency,
        log_level=log_level,
    )
