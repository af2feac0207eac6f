"""
Tool catalog and dispatch

TOOL_CATALOG is what ``tools/list`` advertises. ToolDispatcher validates the
``arguments`` object against the matching input schema, applies the
security validator when one is configured, and calls the project store.
"""

import logging
from typing import Any, Awaitable, Callable, Optional

from mcp.types import TextContent, Tool
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..errors import InvalidArgumentsError, UnknownToolError
from ..schemas.tool_schemas import (
    AddProjectInput,
    ListProjectsInput,
    ProjectNameInput,
    SearchPatternInput,
    UpdateProjectStatusInput,
)
from ..store.project_store import ProjectStore
from ..utils.validators import SecurityValidator

logger = logging.getLogger(__name__)

_PROJECT_NAME_PROPERTY = {"type": "string", "description": "Name of the project"}

TOOL_CATALOG = [
    Tool(
        name="list_projects",
        description="List all Xcode projects being tracked",
        inputSchema={"type": "object", "properties": {}, "required": []},
    ),
    Tool(
        name="get_project_status",
        description="Get the current status and details of a specific project",
        inputSchema={
            "type": "object",
            "properties": {"projectName": _PROJECT_NAME_PROPERTY},
            "required": ["projectName"],
        },
    ),
    Tool(
        name="search_code_patterns",
        description="Search for code patterns across all projects",
        inputSchema={
            "type": "object",
            "properties": {
                "pattern": {"type": "string", "description": "Code pattern or keyword to search for"},
            },
            "required": ["pattern"],
        },
    ),
    Tool(
        name="add_project",
        description="Add a new Xcode project to track",
        inputSchema={
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Project name"},
                "path": {"type": "string", "description": "Path to project"},
                "description": {"type": "string", "description": "Project description"},
            },
            "required": ["name", "path"],
        },
    ),
    Tool(
        name="update_project_status",
        description="Update the status or notes for a project",
        inputSchema={
            "type": "object",
            "properties": {
                "projectName": _PROJECT_NAME_PROPERTY,
                "status": {"type": "string", "description": "New status"},
                "notes": {"type": "string", "description": "Additional notes"},
            },
            "required": ["projectName"],
        },
    ),
]


def tool_catalog() -> list[dict[str, Any]]:
    """Catalog entries as wire dicts (camelCase keys, unset fields omitted)"""
    return [tool.model_dump(by_alias=True, exclude_none=True) for tool in TOOL_CATALOG]


class ToolDispatcher:
    """Routes a tool name and its arguments to the project store."""

    def __init__(self, store: ProjectStore, validator: Optional[SecurityValidator] = None):
        self.store = store
        # None disables input sanitisation
        self.validator = validator
        self._handlers: dict[str, tuple[type[BaseModel], Callable[[Any], Awaitable[str]]]] = {
            "list_projects": (ListProjectsInput, self._list_projects),
            "get_project_status": (ProjectNameInput, self._get_project_status),
            "search_code_patterns": (SearchPatternInput, self._search_code_patterns),
            "add_project": (AddProjectInput, self._add_project),
            "update_project_status": (UpdateProjectStatusInput, self._update_project_status),
        }

    @property
    def tool_names(self) -> list[str]:
        return list(self._handlers)

    async def call(self, name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """
        Execute one tool

        Raises:
            UnknownToolError: name is not in the catalog
            InvalidArgumentsError: arguments do not match the tool schema
            CoordinatorError: any domain, validation or persistence failure
        """
        if name not in self._handlers:
            raise UnknownToolError(name)

        schema, handler = self._handlers[name]
        try:
            params = schema.model_validate(arguments)
        except PydanticValidationError as e:
            raise InvalidArgumentsError(details=str(e)) from e

        logger.debug(f"Calling tool {name}")
        text = await handler(params)
        return [TextContent(type="text", text=text)]

    async def _list_projects(self, params: ListProjectsInput) -> str:
        return await self.store.list_projects()

    async def _get_project_status(self, params: ProjectNameInput) -> str:
        name = params.project_name
        if self.validator:
            name = self.validator.validate_project_name(name)
        return await self.store.get_project_status(name)

    async def _search_code_patterns(self, params: SearchPatternInput) -> str:
        pattern = params.pattern
        if self.validator:
            pattern = self.validator.validate_search_pattern(pattern)
        return await self.store.search_code_patterns(pattern)

    async def _add_project(self, params: AddProjectInput) -> str:
        name, path, description = params.name, params.path, params.description
        if self.validator:
            limits = self.validator.config
            name = self.validator.validate_project_name(name)
            path = self.validator.validate_project_path(path)
            if description is not None:
                description = self.validator.validate_text(
                    description, limits.max_description_length, "Description"
                )
            self.validator.verify_path_exists(path)
        return await self.store.add_project(name, path, description)

    async def _update_project_status(self, params: UpdateProjectStatusInput) -> str:
        name, status, notes = params.project_name, params.status, params.notes
        if self.validator:
            limits = self.validator.config
            name = self.validator.validate_project_name(name)
            if status is not None:
                status = self.validator.validate_text(status, limits.max_status_length, "Status")
            if notes is not None:
                notes = self.validator.validate_text(notes, limits.max_notes_length, "Notes")
        return await self.store.update_project_status(name, status, notes)
