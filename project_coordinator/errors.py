# project_coordinator/errors.py
"""Custom error types for the coordinator.

Every error raised while executing a tool is a CoordinatorError; the
protocol engine turns its message into a -32603 response.
"""


class CoordinatorError(Exception):
    """Base error for coordinator operations."""
    pass


class InvalidArgumentsError(CoordinatorError):
    """Tool arguments are missing or have the wrong type."""

    def __init__(self, message: str = "Invalid arguments provided", details: str = None):
        super().__init__(message)
        self.details = details


class UnknownToolError(CoordinatorError):
    """Tool name is not part of the catalog."""

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool requested: {tool_name}")
        self.tool_name = tool_name


class ProjectNotFoundError(CoordinatorError):
    """No project is tracked under the given name."""

    def __init__(self, project_name: str):
        super().__init__(f"Project not found: {project_name}")
        self.project_name = project_name


class ProjectExistsError(CoordinatorError):
    """A project with the same name is already tracked."""

    def __init__(self, project_name: str):
        super().__init__(
            f"Project already exists: {project_name}. "
            f"Use update_project_status to change it."
        )
        self.project_name = project_name


class TaskNotFoundError(CoordinatorError):
    """Task is not among the project's current tasks."""

    def __init__(self, project_name: str, task: str):
        super().__init__(f"Task not found in {project_name}: {task}")
        self.project_name = project_name
        self.task = task


class PersistenceError(CoordinatorError):
    """A knowledge base document could not be written."""

    def __init__(self, message: str, path: str = None):
        super().__init__(f"File system error: {message}")
        self.path = path


class ValidationError(CoordinatorError):
    """Input rejected by the security validator."""

    def __init__(self, message: str, suggestion: str = None):
        super().__init__(message)
        self.suggestion = suggestion
