"""Project health scoring."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable

from ..models import ACTIVITY_WEIGHTS, ActivityEvent, ProjectWithAnalytics

CRITICAL_THRESHOLD = 40
HEALTHY_THRESHOLD = 70


class FactorType(str, Enum):
    ACTIVITY = "Activity Level"
    STALENESS = "Freshness"
    DOCUMENTATION = "Documentation Quality"
    COMPLETION = "Task Completion"


@dataclass
class HealthFactor:
    type: FactorType
    score: int  # 0-100
    description: str


@dataclass
class ProjectHealth:
    score: int  # 0-100
    factors: list[HealthFactor] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    @property
    def category(self) -> str:
        if self.score < CRITICAL_THRESHOLD:
            return "critical"
        if self.score < HEALTHY_THRESHOLD:
            return "needs_attention"
        return "healthy"

    def factor(self, factor_type: FactorType) -> HealthFactor:
        return next(f for f in self.factors if f.type == factor_type)


def activity_score(events: Iterable[ActivityEvent]) -> int:
    """Weighted sum of events."""
    return sum(ACTIVITY_WEIGHTS[event.type] for event in events)


def calculate_project_health(
    project: ProjectWithAnalytics,
    now: datetime,
    window_days: int = 30,
) -> ProjectHealth:
    """Score a project on activity, freshness, documentation and task completion."""
    recent = project.events_since(now - timedelta(days=window_days))
    activity = min(100, activity_score(recent) * 5)

    days_since_update = (now - project.last_modified).total_seconds() / 86400
    staleness = min(100, max(0, 100 - int(days_since_update * 10)))

    has_description = bool(project.description and project.description.strip())
    has_notes = bool(project.notes and project.notes.strip())
    documentation = (50 if has_description else 0) + (50 if has_notes else 0)

    completed = len(project.completed_tasks)
    total_tasks = completed + len(project.current_tasks)
    completion = completed * 100 // total_tasks if total_tasks > 0 else 50

    factors = [
        HealthFactor(FactorType.ACTIVITY, activity, f"{len(recent)} events in last {window_days} days"),
        HealthFactor(FactorType.STALENESS, staleness, f"Last updated {max(0, int(days_since_update))} days ago"),
        HealthFactor(
            FactorType.DOCUMENTATION,
            documentation,
            "Well documented" if has_description and has_notes else "Needs more documentation",
        ),
        HealthFactor(FactorType.COMPLETION, completion, f"{completed}/{total_tasks} tasks completed"),
    ]

    recommendations = []
    if activity < 30:
        recommendations.append("Increase project activity")
    if staleness < 50:
        recommendations.append("Update project status")
    if documentation < 50:
        recommendations.append("Add project documentation")
    if completion < 30 and total_tasks > 0:
        recommendations.append("Focus on completing tasks")

    score = sum(f.score for f in factors) // len(factors)
    return ProjectHealth(score=score, factors=factors, recommendations=recommendations)
