"""
costs_config -- single public entrypoint for costs settings.

Responsibility:
    ``get_active_settings()`` is the only way runtime code obtains the
    currency and summable-column settings.  The kernel never imports this
    package; hosts pass the resulting ``CostsSettings`` (or its
    ``currency_for``) into kernel objects.

Failure modes:
    - ``FileNotFoundError`` -- an explicit settings path does not exist.
    - ``yaml.YAMLError`` -- malformed YAML.
    - ``ConfigurationError`` -- validation failures.

Every successful call emits a ``COSTS_CONFIG_TRACE`` log entry with the
resolved default currency and the settings checksum.
"""

from __future__ import annotations

import logging
from pathlib import Path

from costs_config.loader import load_settings, parse_settings
from costs_config.schema import SUMMABLE_COLUMNS, CostsSettings

_logger = logging.getLogger("costs_kernel.config")

_DEFAULT_SETTINGS_FILE = Path(__file__).parent / "settings" / "default.yaml"

__all__ = [
    "CostsSettings",
    "SUMMABLE_COLUMNS",
    "get_active_settings",
    "parse_settings",
]


def get_active_settings(path: Path | str | None = None) -> CostsSettings:
    """Load and validate the costs settings.

    Args:
        path: Settings YAML file.  Defaults to the packaged
            ``settings/default.yaml``.
    """
    settings = load_settings(Path(path) if path is not None else _DEFAULT_SETTINGS_FILE)

    _logger.info(
        "COSTS_CONFIG_TRACE",
        extra={
            "trace_type": "COSTS_CONFIG_TRACE",
            "checksum": settings.checksum,
            "currency": settings.default_currency.code,
            "currency_format": settings.default_currency.format,
            "summable_columns": list(settings.summable_columns),
            "project_override_count": len(settings.project_currencies),
        },
    )
    return settings
