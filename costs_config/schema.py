"""
Settings schema (``costs_config.schema``).

Frozen dataclasses produced by ``costs_config.loader``.  Pure data, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping
from uuid import UUID

from costs_kernel.domain.models import CurrencySettings

SUMMABLE_COLUMNS = ("labor_costs", "material_costs", "overall_costs")


@dataclass(frozen=True)
class CostsSettings:
    """Global cost settings plus per-project currency overrides."""

    default_currency: CurrencySettings = CurrencySettings()
    summable_columns: tuple[str, ...] = ()
    project_currencies: Mapping[UUID, CurrencySettings] = field(
        default_factory=lambda: MappingProxyType({})
    )
    checksum: str = ""

    def currency_for(self, project_id: UUID | None) -> CurrencySettings:
        """Currency settings of a project, falling back to the global default."""
        if project_id is None:
            return self.default_currency
        return self.project_currencies.get(project_id, self.default_currency)

    def is_summable(self, column: str) -> bool:
        return column in self.summable_columns
