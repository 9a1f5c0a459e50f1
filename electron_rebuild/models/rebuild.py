"""Rebuild-related data models."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class DependencyClass(str, Enum):
    """Dependency sections of a package manifest."""

    PRODUCTION = "dependencies"
    DEV = "devDependencies"
    OPTIONAL = "optionalDependencies"


def parse_module_set(which_module: str | None) -> list[str]:
    """Split a comma-separated module list, dropping blank entries."""
    if not which_module:
        return []
    return [name.strip() for name in which_module.split(",") if name.strip()]


class RebuildRequest(BaseModel):
    """Parameters for one native module rebuild invocation."""

    version: str = Field(description="Electron version to build against")
    modules_path: Path = Field(description="node_modules directory to rebuild in")
    which_module: str | None = Field(
        default=None,
        description="Comma-separated module names to rebuild (None = all)",
    )
    headers_dir: Path | None = Field(
        default=None,
        description="Headers directory (None = configured default)",
    )
    arch: str | None = Field(
        default=None,
        description="Target architecture (None = host architecture)",
    )
    command: str = Field(
        default="rebuild",
        description="npm command to run",
    )
    ignore_dev_deps: bool = Field(
        default=False,
        description="Leave devDependencies out of the module list",
    )
    ignore_optional_deps: bool = Field(
        default=False,
        description="Leave optionalDependencies out of the module list",
    )

    model_config = {
        "frozen": True,
    }

    @field_validator("version", "command")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty version and command strings."""
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @property
    def module_set(self) -> list[str]:
        """Explicit module names requested."""
        return parse_module_set(self.which_module)

    @property
    def filters_dependencies(self) -> bool:
        """Whether the module list is derived from the package manifest."""
        return self.ignore_dev_deps or self.ignore_optional_deps

    @property
    def manifest_path(self) -> Path:
        """package.json that owns ``modules_path``."""
        return self.modules_path.resolve().parent / "package.json"

    def selected_dependency_classes(self) -> list[DependencyClass]:
        """Dependency classes that contribute to the module list."""
        classes = [DependencyClass.PRODUCTION]
        if not self.ignore_dev_deps:
            classes.append(DependencyClass.DEV)
        if not self.ignore_optional_deps:
            classes.append(DependencyClass.OPTIONAL)
        return classes
