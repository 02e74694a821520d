"""
Costs Kernel

Cost aggregation and visibility for work items:
- Decimal-only labor, material and overall costs
- Per-type cost breakdown with deterministic ordering
- Permission-scoped visibility ("own" entries vs. all entries)
- Currency formatting driven by project settings
"""

__version__ = "0.1.0"
