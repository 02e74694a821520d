"""Selectors for the costs kernel (read side)."""

from costs_kernel.selectors.cost_entry_selector import CostEntrySelector

__all__ = [
    "CostEntrySelector",
]
