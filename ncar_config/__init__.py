"""
ncar_config -- single public entrypoint for tracker configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration files
    directly.

Architecture position:
    Configuration -- YAML-driven settings.  Sits above ``ncar_kernel`` and
    ``ncar_engines`` and below ``ncar_services`` / ``ncar_modules``.  The
    kernel and engines MUST NEVER import from ``ncar_config``; services
    translate settings into explicit engine parameters.

Failure modes:
    - ``FileNotFoundError`` -- the requested file does not exist.
    - ``ValueError`` -- wrong types or out-of-range values.
    - ``yaml.YAMLError`` -- malformed YAML.

Audit relevance:
    Every successful ``get_active_config()`` call emits an
    ``NCAR_CONFIG_TRACE`` log entry with the config id, version, checksum
    and the effective overdue threshold.
"""

from __future__ import annotations

from pathlib import Path

from ncar_config.loader import load_yaml_file, parse_config
from ncar_config.schema import NcarConfig, ScoringConfig
from ncar_kernel.logging_config import get_logger

_logger = get_logger("config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | None = None) -> NcarConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Override path to a YAML file.  Defaults to
            ``ncar_config/sets/default.yaml``.

    Returns:
        A frozen, validated ``NcarConfig``.  Not cached; callers hold it.
    """
    path = Path(config_path) if config_path is not None else _DEFAULT_CONFIG_PATH
    config = parse_config(load_yaml_file(path))

    _logger.info(
        "NCAR_CONFIG_TRACE",
        extra={
            "trace_type": "NCAR_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "checksum": config.checksum,
            "overdue_threshold_days": config.overdue_threshold_days,
            "strict_transitions": config.strict_transitions,
        },
    )
    return config


__all__ = ["NcarConfig", "ScoringConfig", "get_active_config"]
