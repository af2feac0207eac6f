"""Knowledge base persistence package."""

from project_coordinator.storage.knowledge_base import KnowledgeBase

__all__ = ["KnowledgeBase"]
