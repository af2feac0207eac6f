"""Schema validation package

Input schemas for every tool in the catalog.
"""

from .tool_schemas import (
    AddProjectInput,
    ListProjectsInput,
    ProjectNameInput,
    SearchPatternInput,
    ToolInput,
    UpdateProjectStatusInput,
)

__all__ = [
    "ToolInput",
    "ListProjectsInput",
    "ProjectNameInput",
    "SearchPatternInput",
    "AddProjectInput",
    "UpdateProjectStatusInput",
]
