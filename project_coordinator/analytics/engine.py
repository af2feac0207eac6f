"""
Analytics engine

Owns the per-project analytics records and the global technology index.
Every public coroutine holds the engine lock, so each one observes and
leaves a consistent snapshot. Reports are pure computation over that
snapshot.
"""

import asyncio
import logging
from collections import Counter
from datetime import timedelta
from typing import Callable, Optional

from ..models import ActivityType, Project, ProjectWithAnalytics, StatusHistory, TechnologyStats
from ..storage.knowledge_base import KnowledgeBase
from ..utils.dates import format_date, format_day, utcnow
from .health import (
    CRITICAL_THRESHOLD,
    HEALTHY_THRESHOLD,
    ProjectHealth,
    activity_score,
    calculate_project_health,
)

logger = logging.getLogger(__name__)


def heat_glyph(score: int) -> str:
    if score <= 0:
        return "💤"
    if score <= 5:
        return "🔥"
    if score <= 15:
        return "🔥🔥"
    return "🔥🔥🔥"


class AnalyticsEngine:
    """Status timelines, activity scoring, technology trends and health."""

    def __init__(
        self,
        knowledge_base: KnowledgeBase,
        clock: Callable = utcnow,
        heat_map_days: int = 7,
        health_window_days: int = 30,
    ):
        self.knowledge_base = knowledge_base
        self.clock = clock
        self.heat_map_days = heat_map_days
        self.health_window_days = health_window_days
        self._projects: dict[str, ProjectWithAnalytics] = {}
        self._tech_stats = TechnologyStats()
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Loading and updates
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Hydrate analytics records and technology statistics from disk."""
        async with self._lock:
            records = await self.knowledge_base.load_project_analytics()
            self._projects = {record.name: record for record in records}

            stats = await self.knowledge_base.load_tech_stats()
            if stats is None:
                stats = TechnologyStats()
                for record in records:
                    for tech in record.tech_stack:
                        stats.record_technology(tech, record.name, record.last_modified)
            self._tech_stats = stats

        logger.info(f"Loaded analytics for {len(records)} projects")

    async def retain(self, project_names) -> list[str]:
        """Drop in-memory records for projects outside `project_names`.

        Documents on disk are left alone. Returns the dropped names.
        """
        keep = set(project_names)
        async with self._lock:
            dropped = sorted(name for name in self._projects if name not in keep)
            for name in dropped:
                del self._projects[name]
                self._tech_stats.forget_project(name)
        if dropped:
            logger.warning(f"Ignoring analytics for projects that failed to load: {', '.join(dropped)}")
        return dropped

    async def has_analytics(self, project_name: str) -> bool:
        async with self._lock:
            return project_name in self._projects

    async def get_record(self, project_name: str) -> Optional[ProjectWithAnalytics]:
        """Copy of the analytics record, or None if the project is unknown."""
        async with self._lock:
            record = self._projects.get(project_name)
            return record.model_copy(deep=True) if record else None

    async def update_project(self, record: ProjectWithAnalytics) -> None:
        """Upsert a record and fold its technologies into the global index."""
        async with self._lock:
            await self._upsert(record)

    async def migrate_project(self, project: Project) -> ProjectWithAnalytics:
        """Create the analytics record for a project saved without one."""
        record = ProjectWithAnalytics.migrate(project)
        async with self._lock:
            await self._upsert(record)
        logger.info(f"Migrated {project.name} to analytics (created {record.created_date})")
        return record.model_copy(deep=True)

    async def record_activity(
        self,
        project_name: str,
        event_type: ActivityType,
        description: Optional[str] = None,
    ) -> bool:
        """Append an activity event; returns False for unknown projects."""
        async with self._lock:
            record = self._projects.get(project_name)
            if record is None:
                return False
            record = record.model_copy(deep=True)
            record.log_activity(event_type, description, self.clock())
            await self._upsert(record)
            return True

    async def update_status(self, project_name: str, new_status: str) -> bool:
        """Close the open status entry and open a new one."""
        async with self._lock:
            record = self._projects.get(project_name)
            if record is None:
                return False
            record = record.model_copy(deep=True)
            record.change_status(new_status, self.clock())
            await self._upsert(record)
            return True

    async def _upsert(self, record: ProjectWithAnalytics) -> None:
        record = record.model_copy(deep=True)
        now = self.clock()
        stats = self._tech_stats.model_copy(deep=True)
        for tech in record.tech_stack:
            stats.record_technology(tech, record.name, now)

        await self.knowledge_base.save_project_analytics(record)
        await self.knowledge_base.save_tech_stats(stats)
        self._projects[record.name] = record
        self._tech_stats = stats

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    async def tech_stats(self) -> TechnologyStats:
        async with self._lock:
            return self._tech_stats.model_copy(deep=True)

    async def status_timeline(self, project_name: str) -> Optional[str]:
        async with self._lock:
            record = self._projects.get(project_name)
            if record is None:
                return None
            now = self.clock()

            lines = [f"## Status Timeline for {project_name}", ""]
            current = record.current_status_entry
            if record.status and current:
                lines += [f"**Current Status**: {record.status} (for {current.formatted_duration(now)})", ""]

            previous = record.status_history[:-1] if current else record.status_history
            if previous:
                lines.append("### Previous Statuses:")
                for entry in reversed(previous):
                    lines.append(f"- **{entry.status}**: {entry.formatted_duration(now)}")
                lines.append("")

            age = StatusHistory(status="Total", start_date=record.created_date)
            lines.append(f"**Total Project Age**: {age.formatted_duration(now)}")
            return "\n".join(lines)

    async def activity_scores(self, days: Optional[int] = None) -> list[tuple[str, int, int]]:
        """(name, score, event count) over the window, highest score first, then by name."""
        async with self._lock:
            return self._activity_scores(self.heat_map_days if days is None else days)

    def _activity_scores(self, days: int) -> list[tuple[str, int, int]]:
        start = self.clock() - timedelta(days=days)
        scores = []
        for name, record in self._projects.items():
            events = record.events_since(start)
            scores.append((name, activity_score(events), len(events)))
        scores.sort(key=lambda item: (-item[1], item[0]))
        return scores

    async def activity_heat_map(self, days: Optional[int] = None) -> str:
        if days is None:
            days = self.heat_map_days
        async with self._lock:
            lines = [f"## Project Activity Heat Map (Past {days} Days)", ""]
            if not self._projects:
                lines.append("No projects tracked yet.")
                return "\n".join(lines)

            for name, score, event_count in self._activity_scores(days):
                entry = f"{heat_glyph(score)} **{name}** ({score} activity points"
                if event_count:
                    entry += f" - {event_count} events"
                lines.append(entry + ")")

            start = self.clock() - timedelta(days=days)
            daily = Counter()
            for record in self._projects.values():
                for event in record.events_since(start):
                    daily[event.timestamp.date()] += 1

            lines += ["", "### Daily Activity Breakdown:"]
            for day in sorted(daily):
                lines.append(f"- {format_day(day)}: {daily[day]} events")
            return "\n".join(lines)

    async def technology_trends(self) -> str:
        async with self._lock:
            stats = self._tech_stats
            total = len(self._projects)
            ranked = sorted(stats.framework_counts.items(), key=lambda item: (-item[1], item[0]))

            lines = ["## Technology Analysis", ""]
            if ranked:
                lines.append("### Framework Usage:")
                for tech, count in ranked:
                    percentage = stats.usage_percentage(tech, total)
                    lines.append(f"- **{tech}**: {percentage}% of projects ({count}/{total})")
                    users = stats.projects_using.get(tech, [])
                    if users and len(users) <= 3:
                        lines.append(f"  - Used in: {', '.join(users)}")

            emerging = [(tech, count) for tech, count in ranked if 0 < count <= 2]
            if emerging:
                lines += ["", "### Emerging Technologies:"]
                for tech, _ in emerging:
                    users = stats.projects_using.get(tech, [])
                    lines.append(f"- **{tech}** (exploring in: {', '.join(users)})")

            lines += ["", "### Recent Technology Adoptions:"]
            recent = sorted(stats.last_used.items(), key=lambda item: (-item[1].timestamp(), item[0]))[:5]
            for tech, last_used in recent:
                lines.append(f"- {tech}: Last used {format_date(last_used)}")
            return "\n".join(lines)

    async def project_health(self, project_name: str) -> Optional[ProjectHealth]:
        async with self._lock:
            record = self._projects.get(project_name)
            if record is None:
                return None
            return calculate_project_health(record, self.clock(), self.health_window_days)

    async def health_scores(self) -> list[tuple[str, ProjectHealth]]:
        """Every project's health, highest score first, then by name."""
        async with self._lock:
            now = self.clock()
            scores = [
                (name, calculate_project_health(record, now, self.health_window_days))
                for name, record in self._projects.items()
            ]
        scores.sort(key=lambda item: (-item[1].score, item[0]))
        return scores

    async def health_report(self) -> str:
        scores = await self.health_scores()

        lines = ["## Project Health Report", ""]
        if not scores:
            lines.append("No projects tracked yet.")
            return "\n".join(lines)

        critical = [(n, h) for n, h in scores if h.score < CRITICAL_THRESHOLD]
        needs_attention = [(n, h) for n, h in scores if CRITICAL_THRESHOLD <= h.score < HEALTHY_THRESHOLD]
        healthy = [(n, h) for n, h in scores if h.score >= HEALTHY_THRESHOLD]

        if critical:
            lines.append("### 🚨 Critical (Needs Immediate Attention):")
            for name, health in critical:
                lines.append(_format_health(name, health))
        if needs_attention:
            lines.append("### ⚠️ Needs Attention:")
            for name, health in needs_attention:
                lines.append(_format_health(name, health))
        if healthy:
            lines.append("### ✅ Healthy Projects:")
            for name, health in healthy:
                lines.append(f"- **{name}** (Health: {health.score}/100)")
        return "\n".join(lines)


def _format_health(name: str, health: ProjectHealth) -> str:
    lines = [f"#### {name} (Health: {health.score}/100)"]
    for factor in health.factors:
        mark = "✅" if factor.score >= HEALTHY_THRESHOLD else "⚠️" if factor.score >= CRITICAL_THRESHOLD else "❌"
        lines.append(f"  - {mark} {factor.type.value}: {factor.score}/100 - {factor.description}")
    if health.recommendations:
        lines.append(f"  - **Recommendations**: {', '.join(health.recommendations)}")
    return "\n".join(lines) + "\n"
