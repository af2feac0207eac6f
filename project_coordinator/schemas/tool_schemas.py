"""Tool input schemas - centralized argument validation

Each tool's `arguments` object is validated against one of these models
before the dispatcher touches the project store. Strict string fields
reject numbers, booleans and nested values instead of coercing them.
Field aliases are the wire names advertised in the tool catalog.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class ToolInput(BaseModel):
    """Base for tool arguments; unknown keys are ignored"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ListProjectsInput(ToolInput):
    """Used by: list_projects tool"""
    pass


class ProjectNameInput(ToolInput):
    """Schema for single-project lookups

    Used by: get_project_status tool
    """
    model_config = ConfigDict(json_schema_extra={
        "example": {"projectName": "WeatherApp"}
    })

    project_name: StrictStr = Field(..., alias="projectName", description="Name of the project")


class SearchPatternInput(ToolInput):
    """Schema for pattern search

    Used by: search_code_patterns tool
    """
    model_config = ConfigDict(json_schema_extra={
        "example": {"pattern": "SwiftUI"}
    })

    pattern: StrictStr = Field(..., description="Code pattern or keyword to search for")


class AddProjectInput(ToolInput):
    """Schema for registering a project

    Used by: add_project tool
    """
    model_config = ConfigDict(json_schema_extra={
        "example": {
            "name": "WeatherApp",
            "path": "~/Developer/WeatherApp",
            "description": "iOS weather application"
        }
    })

    name: StrictStr = Field(..., description="Project name")
    path: StrictStr = Field(..., description="Path to project")
    description: Optional[StrictStr] = Field(default=None, description="Project description")


class UpdateProjectStatusInput(ToolInput):
    """Schema for partial status/notes updates

    Used by: update_project_status tool
    """
    model_config = ConfigDict(json_schema_extra={
        "example": {
            "projectName": "WeatherApp",
            "status": "Beta testing",
            "notes": "Waiting on TestFlight review"
        }
    })

    project_name: StrictStr = Field(..., alias="projectName", description="Name of the project")
    status: Optional[StrictStr] = Field(default=None, description="New status")
    notes: Optional[StrictStr] = Field(default=None, description="Additional notes")
