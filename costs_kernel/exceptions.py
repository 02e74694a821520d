"""
Typed Exception Hierarchy for the Costs Kernel.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from CostsKernelError:

    CostsKernelError (base)
    |
    +-- InconsistentDataError
    |   +-- UnknownCostTypeError
    |   +-- ForeignEntryError
    |
    +-- WorkItemError
    |   +-- WorkItemNotFoundError
    |
    +-- CurrencyError
    |   +-- InvalidCurrencyError
    |   +-- CurrencyMismatchError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                   | When Raised
----------------|------------------------|-----------------------------------------
Data            | INCONSISTENT_DATA      | Log entry cannot be resolved
                | UNKNOWN_COST_TYPE      | Cost entry references a missing type
                | FOREIGN_ENTRY          | Entry belongs to another work item
----------------|------------------------|-----------------------------------------
Work item       | WORK_ITEM_NOT_FOUND    | Work item id doesn't exist
----------------|------------------------|-----------------------------------------
Currency        | INVALID_CURRENCY       | Not a valid ISO 4217 code
                | CURRENCY_MISMATCH      | Mixed currencies in operation
----------------|------------------------|-----------------------------------------
Config          | INVALID_CONFIGURATION  | Settings failed validation

===============================================================================
NOTES
===============================================================================

"Costs disabled" is NOT an error.  Aggregation returns the NOT_APPLICABLE
marker (see costs_kernel.domain.values) and the field is simply omitted.

"Not permitted" is NOT an error either.  The visibility policy never asks
the aggregator for a figure the user may not see.

InconsistentDataError is a defect in the entry store.  It is raised to the
caller rather than skipped, because dropping an entry would corrupt the sum.
"""


class CostsKernelError(Exception):
    """
    Base exception for all costs kernel errors.

    All subclasses carry a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "COSTS_KERNEL_ERROR"


# Data consistency exceptions


class InconsistentDataError(CostsKernelError):
    """A log entry references something that cannot be resolved."""

    code: str = "INCONSISTENT_DATA"


class UnknownCostTypeError(InconsistentDataError):
    """Cost entry references a cost type that is not in the catalog."""

    code: str = "UNKNOWN_COST_TYPE"

    def __init__(self, entry_id: str, cost_type_id: str):
        self.entry_id = entry_id
        self.cost_type_id = cost_type_id
        super().__init__(
            f"Cost entry {entry_id} references unknown cost type {cost_type_id}"
        )


class ForeignEntryError(InconsistentDataError):
    """Entry was supplied for a work item it does not belong to."""

    code: str = "FOREIGN_ENTRY"

    def __init__(self, entry_id: str, expected_work_item_id: str, actual_work_item_id: str):
        self.entry_id = entry_id
        self.expected_work_item_id = expected_work_item_id
        self.actual_work_item_id = actual_work_item_id
        super().__init__(
            f"Entry {entry_id} belongs to work item {actual_work_item_id}, "
            f"not {expected_work_item_id}"
        )


# Work item exceptions


class WorkItemError(CostsKernelError):
    """Base exception for work item lookups."""

    code: str = "WORK_ITEM_ERROR"


class WorkItemNotFoundError(WorkItemError):
    """Work item with given ID was not found."""

    code: str = "WORK_ITEM_NOT_FOUND"

    def __init__(self, work_item_id: str):
        self.work_item_id = work_item_id
        super().__init__(f"Work item not found: {work_item_id}")


# Currency exceptions


class CurrencyError(CostsKernelError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class InvalidCurrencyError(CurrencyError):
    """Invalid ISO 4217 currency code provided."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Invalid ISO 4217 currency code: '{currency}'")


class CurrencyMismatchError(CurrencyError):
    """Attempted operation on mismatched currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, currency1: str, currency2: str):
        self.currency1 = currency1
        self.currency2 = currency2
        super().__init__(f"Currency mismatch: {currency1} vs {currency2}")


# Configuration exceptions


class ConfigurationError(CostsKernelError):
    """Costs settings failed validation."""

    code: str = "INVALID_CONFIGURATION"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid setting '{key}': {reason}")
