"""
Project store

The authoritative name -> Project map. Every public coroutine runs under a
single asyncio.Lock, so concurrent tool calls are applied one at a time and
each observes a consistent snapshot. Mutations persist the project
document, regenerate the index, and forward the updated analytics record
to the analytics engine before releasing the lock.
"""

import asyncio
import logging
from typing import Callable, Optional

from ..analytics.engine import AnalyticsEngine
from ..errors import (
    InvalidArgumentsError,
    PersistenceError,
    ProjectExistsError,
    ProjectNotFoundError,
    TaskNotFoundError,
)
from ..models import DEFAULT_STATUS, ActivityType, Project, ProjectWithAnalytics
from ..storage.knowledge_base import KnowledgeBase
from ..templates import render_index
from ..utils.dates import format_display, utcnow
from .tech_detection import detect_tech_stack

logger = logging.getLogger(__name__)

NO_PROJECTS_MESSAGE = """No projects currently tracked.

To add a project, use: add_project
Example: add_project name:"WeatherApp" path:"~/Developer/WeatherApp" description:"iOS weather application\""""

NOTE_EXCERPT_LENGTH = 120


class ProjectStore:
    """Serialized project map backed by the knowledge base."""

    def __init__(
        self,
        knowledge_base: KnowledgeBase,
        analytics: AnalyticsEngine,
        clock: Callable = utcnow,
    ):
        self.knowledge_base = knowledge_base
        self.analytics = analytics
        self.clock = clock
        self._projects: dict[str, Project] = {}
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Create the knowledge base layout and hydrate projects and analytics."""
        async with self._lock:
            await asyncio.to_thread(self.knowledge_base.ensure_layout)

            projects = await self.knowledge_base.load_projects()
            self._projects = {project.name: project for project in projects}
            await self.analytics.load()
            await self.analytics.retain(self._projects)

            for name in sorted(self._projects):
                if await self.analytics.has_analytics(name):
                    continue
                try:
                    await self.analytics.migrate_project(self._projects[name])
                except PersistenceError as e:
                    logger.warning(f"Could not migrate analytics for {name}: {e}")

            await self._write_index()

        logger.info(f"Project store ready: {len(self._projects)} projects in {self.knowledge_base.root}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_project(self, project_name: str) -> Project:
        async with self._lock:
            return self._require(project_name).model_copy(deep=True)

    async def project_names(self) -> list[str]:
        async with self._lock:
            return sorted(self._projects)

    async def list_projects(self) -> str:
        async with self._lock:
            if not self._projects:
                return NO_PROJECTS_MESSAGE

            lines = ["# Tracked Projects", ""]
            for name in sorted(self._projects):
                project = self._projects[name]
                lines.append(f"## {project.name}")
                lines.append(f"- **Path**: {project.path}")
                if project.description:
                    lines.append(f"- **Description**: {project.description}")
                if project.status:
                    lines.append(f"- **Status**: {project.status}")
                lines.append(f"- **Tech Stack**: {', '.join(project.tech_stack)}")
                lines.append(f"- **Last Modified**: {format_display(project.last_modified)}")
                if project.current_tasks:
                    lines.append("- **Current Tasks**:")
                    lines += [f"  - {task}" for task in project.current_tasks]
                lines.append("")
            return "\n".join(lines)

    async def get_project_status(self, project_name: str) -> str:
        async with self._lock:
            project = self._require(project_name)

            lines = [f"# {project.name} Status", "", f"**Path**: {project.path}", ""]
            if project.description:
                lines += ["## Description", project.description, ""]
            if project.status:
                lines += ["## Current Status", project.status, ""]

            lines.append("## Tech Stack")
            lines += [f"- {tech}" for tech in project.tech_stack]
            lines.append("")

            if project.current_tasks:
                lines.append("## Current Tasks")
                lines += [f"- [ ] {task}" for task in project.current_tasks]
                lines.append("")
            if project.notes:
                lines += ["## Notes", project.notes, ""]

            lines.append(f"**Last Updated**: {format_display(project.last_modified)}")

            timeline = await self.analytics.status_timeline(project_name)
            if timeline:
                lines += ["", timeline]

            await self._record_read(project_name, ActivityType.ACCESSED)
            return "\n".join(lines)

    async def search_code_patterns(self, pattern: str) -> str:
        async with self._lock:
            needle = pattern.lower()
            results = []

            for relative_name, text in await self.knowledge_base.read_patterns():
                if needle in text.lower():
                    results.append(f"Found in {relative_name}")

            matched_projects = []
            for name in sorted(self._projects):
                project = self._projects[name]
                matched = False
                if project.notes and needle in project.notes.lower():
                    results.append(f"Found in project {name} notes")
                    matched = True
                technologies = [tech for tech in project.tech_stack if needle in tech.lower()]
                if technologies:
                    results.append(f"{name} uses {', '.join(technologies)}")
                    matched = True
                if matched:
                    matched_projects.append(name)

            if not results:
                return f"No results found for pattern: {pattern}"

            for name in matched_projects:
                await self._record_read(name, ActivityType.SEARCHED, f"Matched search: {pattern}")

            return f"# Search Results for '{pattern}'\n\n" + "\n".join(f"- {r}" for r in results)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add_project(self, name: str, path: str, description: Optional[str] = None) -> str:
        async with self._lock:
            if name in self._projects:
                raise ProjectExistsError(name)

            tech_stack = await asyncio.to_thread(detect_tech_stack, path)
            now = self.clock()
            project = Project(
                name=name,
                path=path,
                description=description,
                status=DEFAULT_STATUS,
                tech_stack=tech_stack,
                last_modified=now,
                current_tasks=[],
            )

            await self.knowledge_base.save_project(project)
            self._projects[name] = project
            await self._write_index()
            await self.analytics.update_project(ProjectWithAnalytics.new(project, now))

            logger.info(f"Added project {name} at {path} ({', '.join(tech_stack)})")
            return (
                f"Successfully added project: {name}\n"
                f"Path: {path}\n"
                f"Detected tech stack: {', '.join(tech_stack)}\n"
                f"\n"
                f"You can now:\n"
                f"- Update status: update_project_status projectName:\"{name}\" status:\"your status\"\n"
                f"- Add notes: update_project_status projectName:\"{name}\" notes:\"your notes\""
            )

    async def update_project_status(
        self,
        project_name: str,
        status: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> str:
        async with self._lock:
            previous = self._require(project_name)
            now = self.clock()

            updated = previous.model_copy(deep=True)
            if status is not None:
                updated.status = status
            if notes is not None:
                updated.notes = notes
            updated.last_modified = now

            await self._commit(updated)

            record = await self._analytics_record(previous)
            record.apply_base(updated)
            if status is not None and status != record.status:
                record.change_status(status, now)
            if notes:
                record.log_activity(ActivityType.NOTE_ADDED, _excerpt(notes), now)
            await self.analytics.update_project(record)

            logger.info(f"Updated {project_name} (status={status!r}, notes={'yes' if notes else 'no'})")
            return f"Successfully updated {project_name}"

    async def add_task(self, project_name: str, task: str) -> str:
        task = task.strip()
        if not task:
            raise InvalidArgumentsError("Task description cannot be empty")

        async with self._lock:
            previous = self._require(project_name)
            now = self.clock()

            updated = previous.model_copy(deep=True)
            updated.current_tasks.append(task)
            updated.last_modified = now
            await self._commit(updated)

            record = await self._analytics_record(previous)
            record.apply_base(previous)
            record.add_task(task, now)
            await self.analytics.update_project(record)
            return f"Added task to {project_name}: {task}"

    async def complete_task(self, project_name: str, task: str) -> str:
        async with self._lock:
            previous = self._require(project_name)
            if task not in previous.current_tasks:
                raise TaskNotFoundError(project_name, task)
            now = self.clock()

            updated = previous.model_copy(deep=True)
            updated.current_tasks.remove(task)
            updated.last_modified = now
            await self._commit(updated)

            record = await self._analytics_record(previous)
            record.apply_base(previous)
            record.complete_task(task, now)
            await self.analytics.update_project(record)
            return f"Completed task in {project_name}: {task}"

    # ------------------------------------------------------------------
    # Internals (caller holds the lock)
    # ------------------------------------------------------------------

    def _require(self, project_name: str) -> Project:
        project = self._projects.get(project_name)
        if project is None:
            raise ProjectNotFoundError(project_name)
        return project

    async def _commit(self, project: Project) -> None:
        """Persist first so a failed write leaves the in-memory map untouched."""
        await self.knowledge_base.save_project(project)
        self._projects[project.name] = project
        await self._write_index()

    async def _analytics_record(self, project: Project) -> ProjectWithAnalytics:
        record = await self.analytics.get_record(project.name)
        return record if record is not None else ProjectWithAnalytics.migrate(project)

    async def _write_index(self) -> None:
        try:
            await self.knowledge_base.write_index(render_index(self._projects.values(), self.clock()))
        except PersistenceError as e:
            logger.warning(f"Could not regenerate project index: {e}")

    async def _record_read(self, project_name: str, event_type: ActivityType, description: Optional[str] = None) -> None:
        try:
            await self.analytics.record_activity(project_name, event_type, description)
        except PersistenceError as e:
            logger.warning(f"Could not record {event_type.value} for {project_name}: {e}")


def _excerpt(text: str) -> str:
    text = " ".join(text.split())
    if len(text) <= NOTE_EXCERPT_LENGTH:
        return text
    return text[:NOTE_EXCERPT_LENGTH - 3] + "..."
