"""Analytics: status timelines, activity scoring, technology trends, health."""

from .engine import AnalyticsEngine, heat_glyph
from .health import FactorType, HealthFactor, ProjectHealth, calculate_project_health

__all__ = [
    "AnalyticsEngine",
    "heat_glyph",
    "FactorType",
    "HealthFactor",
    "ProjectHealth",
    "calculate_project_health",
]
