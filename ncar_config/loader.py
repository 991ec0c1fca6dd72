"""
Configuration Loader (``ncar_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the frozen
``ncar_config.schema.NcarConfig``.  Runtime callers go through
``ncar_config.get_active_config()`` instead of calling this directly.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Wrong value types  -> ``ValueError``.
* Out-of-range values  -> ``ValueError`` from the schema's ``__post_init__``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from ncar_config.schema import DEFAULT_AREAS, NcarConfig, ScoringConfig


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return data


def _int(data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    # bool is an int subclass; "true" is never a valid day count
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    return value


def _bool(data: dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be a boolean, got {value!r}")
    return value


def parse_scoring(data: dict[str, Any] | None) -> ScoringConfig:
    data = data or {}
    return ScoringConfig(
        base_score=_int(data, "base_score", 100),
        escalation_penalty=_int(data, "escalation_penalty", 20),
        open_penalty=_int(data, "open_penalty", 5),
    )


def parse_config(data: dict[str, Any]) -> NcarConfig:
    """
    Parse an ``NcarConfig`` from a dict.  Every key is optional.

    Raises:
        ValueError: if a value has the wrong type or is out of range.
    """
    areas = data.get("areas", DEFAULT_AREAS)
    if not isinstance(areas, (list, tuple)):
        raise ValueError(f"areas must be a list, got {areas!r}")
    return NcarConfig(
        config_id=str(data.get("config_id", "default")),
        version=_int(data, "version", 1),
        overdue_threshold_days=_int(data, "overdue_threshold_days", 5),
        strict_transitions=_bool(data, "strict_transitions", False),
        default_deadline_days=_int(data, "default_deadline_days", 7),
        scoring=parse_scoring(data.get("scoring")),
        areas=tuple(str(a) for a in areas),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
