"""Shared test fixtures."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

START = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Injectable clock; call it for 'now', advance it between steps."""

    def __init__(self, start: datetime = START):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def kb_root(tmp_path):
    return tmp_path / "KnowledgeBase"


@pytest.fixture
def knowledge_base(kb_root):
    from project_coordinator.storage import KnowledgeBase

    kb = KnowledgeBase(kb_root)
    kb.ensure_layout()
    return kb


@pytest.fixture
def analytics(knowledge_base, clock):
    from project_coordinator.analytics import AnalyticsEngine

    return AnalyticsEngine(knowledge_base, clock=clock)


@pytest.fixture
def store(knowledge_base, analytics, clock):
    from project_coordinator.store import ProjectStore

    project_store = ProjectStore(knowledge_base, analytics, clock=clock)
    asyncio.run(project_store.initialize())
    return project_store


@pytest.fixture
def project_dir(tmp_path):
    """An empty project directory (no manifests, no sources)."""
    path = tmp_path / "Developer" / "Foo"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def quiet_env(monkeypatch, kb_root):
    """Environment for CLI/server runs: temp knowledge base, logging off."""
    monkeypatch.setenv("KNOWLEDGE_BASE_PATH", str(kb_root))
    monkeypatch.setenv("ENABLE_LOGGING", "false")
    monkeypatch.delenv("ENABLE_VALIDATION", raising=False)
    monkeypatch.delenv("DEBUG", raising=False)
    return kb_root
