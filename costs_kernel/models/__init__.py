"""ORM models for the cost entry store (read path only)."""

from costs_kernel.models.cost_entry import CostEntryModel, CostTypeModel, TimeEntryModel
from costs_kernel.models.project import ProjectModel, WorkPackageModel

__all__ = [
    "ProjectModel",
    "WorkPackageModel",
    "CostTypeModel",
    "TimeEntryModel",
    "CostEntryModel",
]
