"""Persisted records

Projects, their analytics companions, and the global technology index.
Field aliases keep the camelCase document layout of the knowledge base.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer

from .errors import TaskNotFoundError
from .utils.dates import ensure_utc, format_timestamp

Timestamp = Annotated[
    datetime,
    AfterValidator(ensure_utc),
    PlainSerializer(format_timestamp, return_type=str, when_used="json"),
]

DEFAULT_STATUS = "Active"


class CamelModel(BaseModel):
    """Base model accepting both field names and camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)


class Project(CamelModel):
    """A tracked project as stored in projects/<name>.json"""

    name: str = Field(frozen=True)
    path: str = Field(frozen=True)
    description: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    tech_stack: list[str] = Field(default_factory=list, alias="techStack")
    last_modified: Timestamp = Field(alias="lastModified")
    current_tasks: list[str] = Field(default_factory=list, alias="currentTasks")


class ActivityType(str, Enum):
    STATUS_CHANGE = "status_change"
    NOTE_ADDED = "note_added"
    TASK_ADDED = "task_added"
    TASK_COMPLETED = "task_completed"
    ACCESSED = "accessed"
    SEARCHED = "searched"


ACTIVITY_WEIGHTS = {
    ActivityType.STATUS_CHANGE: 5,
    ActivityType.NOTE_ADDED: 3,
    ActivityType.TASK_ADDED: 2,
    ActivityType.TASK_COMPLETED: 4,
    ActivityType.ACCESSED: 1,
    ActivityType.SEARCHED: 1,
}

# Read-only events do not count as a modification of the project
READ_EVENTS = frozenset({ActivityType.ACCESSED, ActivityType.SEARCHED})


class ActivityEvent(CamelModel):
    timestamp: Timestamp
    type: ActivityType
    description: Optional[str] = None


class StatusHistory(CamelModel):
    """One status period; an entry without end_date is the current status."""

    status: str
    start_date: Timestamp = Field(alias="startDate")
    end_date: Optional[Timestamp] = Field(default=None, alias="endDate")

    @property
    def is_open(self) -> bool:
        return self.end_date is None

    def duration(self, now: datetime) -> timedelta:
        end = self.end_date or now
        return max(timedelta(0), end - self.start_date)

    def formatted_duration(self, now: datetime) -> str:
        return format_duration(self.duration(now))


def format_duration(duration: timedelta) -> str:
    """Human-readable duration, minutes only shown for spans under a day."""
    seconds = max(0, int(duration.total_seconds()))
    days = seconds // 86400
    hours = (seconds % 86400) // 3600
    minutes = (seconds % 3600) // 60

    parts = []
    if days > 0:
        parts.append(f"{days} day{'' if days == 1 else 's'}")
    if hours > 0:
        parts.append(f"{hours} hour{'' if hours == 1 else 's'}")
    if minutes > 0 and days == 0:
        parts.append(f"{minutes} minute{'' if minutes == 1 else 's'}")

    return ", ".join(parts) if parts else "Just started"


class ProjectWithAnalytics(Project):
    """Project plus status timeline, activity log and task history."""

    status_history: list[StatusHistory] = Field(default_factory=list, alias="statusHistory")
    activity_log: list[ActivityEvent] = Field(default_factory=list, alias="activityLog")
    created_date: Timestamp = Field(frozen=True, alias="createdDate")
    completed_tasks: list[str] = Field(default_factory=list, alias="completedTasks")

    @classmethod
    def new(cls, project: Project, now: datetime) -> "ProjectWithAnalytics":
        """Analytics record for a freshly added project."""
        history = [StatusHistory(status=project.status, start_date=now)] if project.status else []
        return cls(**_base_fields(project), created_date=now, status_history=history)

    @classmethod
    def migrate(cls, project: Project) -> "ProjectWithAnalytics":
        """Analytics record for a project saved before analytics existed.

        The creation date is backfilled from the legacy last-modified
        timestamp, not from the time of migration.
        """
        history = []
        if project.status:
            history = [StatusHistory(status=project.status, start_date=project.last_modified)]
        return cls(**_base_fields(project), created_date=project.last_modified, status_history=history)

    @property
    def current_status_entry(self) -> Optional[StatusHistory]:
        if self.status_history and self.status_history[-1].is_open:
            return self.status_history[-1]
        return None

    def apply_base(self, project: Project) -> None:
        """Copy the mutable project fields; status flows through change_status."""
        self.description = project.description
        self.notes = project.notes
        self.tech_stack = list(project.tech_stack)
        self.last_modified = project.last_modified
        self.current_tasks = list(project.current_tasks)
        self.completed_tasks = [t for t in self.completed_tasks if t not in self.current_tasks]

    def change_status(self, new_status: str, now: datetime) -> None:
        for entry in self.status_history:
            if entry.end_date is None:
                entry.end_date = now
        self.status_history.append(StatusHistory(status=new_status, start_date=now))
        self.status = new_status
        self.log_activity(ActivityType.STATUS_CHANGE, f"Status changed to: {new_status}", now)

    def log_activity(self, event_type: ActivityType, description: Optional[str], now: datetime) -> None:
        self.activity_log.append(ActivityEvent(timestamp=now, type=event_type, description=description))
        if event_type not in READ_EVENTS:
            self.last_modified = now

    def add_task(self, task: str, now: datetime) -> None:
        self.current_tasks.append(task)
        self.completed_tasks = [t for t in self.completed_tasks if t != task]
        self.log_activity(ActivityType.TASK_ADDED, task, now)

    def complete_task(self, task: str, now: datetime) -> None:
        if task not in self.current_tasks:
            raise TaskNotFoundError(self.name, task)
        self.current_tasks.remove(task)
        self.completed_tasks.append(task)
        self.log_activity(ActivityType.TASK_COMPLETED, task, now)

    def events_since(self, start: datetime) -> list[ActivityEvent]:
        return [event for event in self.activity_log if event.timestamp > start]


class TechnologyStats(CamelModel):
    """Global technology index stored in analytics/global-tech-stats.json"""

    framework_counts: dict[str, int] = Field(default_factory=dict, alias="frameworkCounts")
    last_used: dict[str, Timestamp] = Field(default_factory=dict, alias="lastUsed")
    projects_using: dict[str, list[str]] = Field(default_factory=dict, alias="projectsUsing")

    def record_technology(self, tech: str, project_name: str, now: datetime) -> None:
        projects = self.projects_using.setdefault(tech, [])
        if project_name not in projects:
            projects.append(project_name)
        self.framework_counts[tech] = len(projects)
        self.last_used[tech] = now

    def usage_percentage(self, tech: str, total_projects: int) -> int:
        if total_projects <= 0:
            return 0
        return self.framework_counts.get(tech, 0) * 100 // total_projects

    def forget_project(self, project_name: str) -> None:
        """Remove a project from every technology it was counted under."""
        for tech in list(self.projects_using):
            projects = [p for p in self.projects_using[tech] if p != project_name]
            if projects:
                self.projects_using[tech] = projects
                self.framework_counts[tech] = len(projects)
            else:
                del self.projects_using[tech]
                self.framework_counts.pop(tech, None)
                self.last_used.pop(tech, None)


def _base_fields(project: Project) -> dict:
    return project.model_dump(include=set(Project.model_fields))
