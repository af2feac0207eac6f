"""Project store and tech-stack detection."""

from .project_store import ProjectStore
from .tech_detection import detect_tech_stack

__all__ = ["ProjectStore", "detect_tech_stack"]
