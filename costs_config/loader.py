"""
Settings Loader (``costs_config.loader``).

Responsibility
--------------
Loads the costs settings YAML file and parses it into a frozen
``CostsSettings``.  Hosts should not call this directly; the runtime
entry point is ``costs_config.get_active_settings()``.

File layout
-----------
::

    default:
      costs_currency: EUR
      costs_currency_format: "%n %u"
      costs_currency_unit: "€"        # optional, replaces %u
    summable_columns: [overall_costs]
    projects:
      6f1c...:                        # project id
        costs_currency: USD

Project entries override only the keys they name.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown currency, format without ``%n``, unknown summable column or bad
  project id  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from types import MappingProxyType
from typing import Any
from uuid import UUID

import yaml

from costs_config.schema import SUMMABLE_COLUMNS, CostsSettings
from costs_kernel.domain.currency import CurrencyRegistry
from costs_kernel.domain.models import (
    DEFAULT_CURRENCY_CODE,
    DEFAULT_CURRENCY_FORMAT,
    CurrencySettings,
)
from costs_kernel.exceptions import ConfigurationError

CURRENCY_KEY = "costs_currency"
FORMAT_KEY = "costs_currency_format"
UNIT_KEY = "costs_currency_unit"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file; an empty file yields an empty dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON form of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_currency(data: dict[str, Any], base: CurrencySettings) -> CurrencySettings:
    """Parse currency keys, taking anything unspecified from ``base``."""
    code = str(data.get(CURRENCY_KEY, base.code)).upper().strip()
    if not CurrencyRegistry.is_valid(code):
        raise ConfigurationError(CURRENCY_KEY, f"unknown ISO 4217 currency {code!r}")

    template = data.get(FORMAT_KEY, base.format)
    if not isinstance(template, str) or "%n" not in template:
        raise ConfigurationError(FORMAT_KEY, f"template must contain %n, got {template!r}")

    unit = data.get(UNIT_KEY, base.unit)
    return CurrencySettings(code=code, format=template, unit=None if unit is None else str(unit))


def parse_summable_columns(value: Any) -> tuple[str, ...]:
    columns = tuple(value or ())
    unknown = [c for c in columns if c not in SUMMABLE_COLUMNS]
    if unknown:
        raise ConfigurationError("summable_columns", f"unknown columns {unknown}")
    return columns


def parse_settings(data: dict[str, Any]) -> CostsSettings:
    """Parse a settings dict (the YAML document) into ``CostsSettings``."""
    default = parse_currency(
        data.get("default") or {},
        CurrencySettings(code=DEFAULT_CURRENCY_CODE, format=DEFAULT_CURRENCY_FORMAT),
    )

    projects: dict[UUID, CurrencySettings] = {}
    for raw_id, overrides in (data.get("projects") or {}).items():
        try:
            project_id = UUID(str(raw_id))
        except ValueError as e:
            raise ConfigurationError("projects", f"invalid project id {raw_id!r}") from e
        projects[project_id] = parse_currency(overrides or {}, default)

    return CostsSettings(
        default_currency=default,
        summable_columns=parse_summable_columns(data.get("summable_columns")),
        project_currencies=MappingProxyType(projects),
        checksum=compute_checksum(data),
    )


def load_settings(path: Path) -> CostsSettings:
    return parse_settings(load_yaml_file(path))
