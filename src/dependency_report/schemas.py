"""Pydantic schemas for the dependency lister's output.

Purpose
-------
``go list -m -u -json all`` prints one JSON object per module. These models
validate that stream at the system boundary; the rest of the pipeline only
sees :class:`~dependency_report.models.DependencyRecord`.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .models import DependencyRecord


class ModuleUpdateSchema(BaseModel):
    """The ``Update`` object attached to a module with a newer release."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    path: str = Field(default="", alias="Path")
    version: str = Field(alias="Version")


class ModuleSchema(BaseModel):
    """One module entry emitted by the dependency lister."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    path: str = Field(alias="Path", min_length=1)
    version: str = Field(default="", alias="Version")
    update: ModuleUpdateSchema | None = Field(default=None, alias="Update")
    main: bool = Field(default=False, alias="Main")
    indirect: bool = Field(default=False, alias="Indirect")

    def to_record(self) -> DependencyRecord:
        """Convert into the domain dataclass."""
        available = self.update.version if self.update is not None else self.version
        return DependencyRecord(
            module_path=self.path,
            current_version=self.version,
            available_version=available,
            direct=not self.indirect,
        )


__all__ = [
    "ModuleSchema",
    "ModuleUpdateSchema",
]
