"""
SQLAlchemy ORM models for projects and work packages.

Only the columns the cost core reads are mapped; the rest of the host's
project and work package schema is not this package's concern.
"""

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from costs_kernel.db.base import TimestampedBase
from costs_kernel.domain.models import CurrencySettings, Project, WorkItem


class ProjectModel(TimestampedBase):
    """A project.  ``costs_enabled`` mirrors the costs module being active."""

    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    costs_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    work_packages: Mapped[list["WorkPackageModel"]] = relationship(
        "WorkPackageModel",
        back_populates="project",
        lazy="selectin",
    )

    def to_dto(self, currency: CurrencySettings) -> Project:
        return Project(
            id=self.id,
            name=self.name,
            costs_enabled=self.costs_enabled,
            currency=currency,
        )

    def __repr__(self) -> str:
        return f"<ProjectModel {self.name} costs={'on' if self.costs_enabled else 'off'}>"


class WorkPackageModel(TimestampedBase):
    """A work package (work item) belonging to a project."""

    __tablename__ = "work_packages"

    __table_args__ = (
        Index("idx_work_packages_project", "project_id"),
    )

    project_id: Mapped[UUID] = mapped_column(ForeignKey("projects.id"), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)

    project: Mapped[ProjectModel] = relationship(
        "ProjectModel",
        back_populates="work_packages",
        lazy="joined",
    )

    def to_dto(self, currency: CurrencySettings) -> WorkItem:
        return WorkItem(
            id=self.id,
            project=self.project.to_dto(currency),
            subject=self.subject,
        )

    def __repr__(self) -> str:
        return f"<WorkPackageModel {self.subject!r}>"
