"""API and HTML paths advertised by cost representations."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlencode
from uuid import UUID


@dataclass(frozen=True)
class ApiPaths:
    """Builds the hrefs used in ``_links``.  Prefixes are injectable."""

    root: str = "/api/v3"
    html_root: str = ""

    def work_package(self, work_item_id: UUID) -> str:
        return f"{self.root}/work_packages/{work_item_id}"

    def cost_entry(self, entry_id: UUID) -> str:
        return f"{self.root}/cost_entries/{entry_id}"

    def cost_entries_by_work_package(self, work_item_id: UUID) -> str:
        return f"{self.work_package(work_item_id)}/cost_entries"

    def summarized_work_package_costs_by_type(self, work_item_id: UUID) -> str:
        return f"{self.work_package(work_item_id)}/summarized_costs_by_type"

    def cost_type(self, cost_type_id: UUID) -> str:
        return f"{self.root}/cost_types/{cost_type_id}"

    def user(self, user_id: UUID) -> str:
        return f"{self.root}/users/{user_id}"

    # HTML pages

    def new_work_package_cost_entry(self, work_item_id: UUID) -> str:
        return f"{self.html_root}/work_packages/{work_item_id}/cost_entries/new"

    def cost_reports(self, project_id: UUID, work_item_id: UUID) -> str:
        query = urlencode(
            [
                ("fields[]", "WorkPackageId"),
                ("operators[WorkPackageId]", "="),
                ("values[WorkPackageId]", str(work_item_id)),
                ("set_filter", "1"),
            ]
        )
        return f"{self.html_root}/projects/{project_id}/cost_reports?{query}"
