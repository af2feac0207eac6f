"""
Knowledge base persistence

One JSON document per project, one analytics document per project, and a
single global technology statistics document. Each file is the unit of
durability; writes go through a temp file and os.replace.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Callable, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import PersistenceError
from ..models import Project, ProjectWithAnalytics, TechnologyStats
from ..templates import DEFAULT_DOCUMENTS, render_project_summary

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

SUBDIRECTORIES = ("projects", "analytics", "patterns", "tools", "templates")
ANALYTICS_SUFFIX = "-analytics.json"
SUMMARY_SUFFIX = "-summary.md"
INDEX_FILE = "project-index.md"
TECH_STATS_FILE = "global-tech-stats.json"


class KnowledgeBase:
    """Filesystem layout and document I/O for the coordinator."""

    def __init__(self, root: Path):
        self.root = Path(root)
        self._file_locks: dict[Path, asyncio.Lock] = {}

    @property
    def projects_dir(self) -> Path:
        return self.root / "projects"

    @property
    def analytics_dir(self) -> Path:
        return self.root / "analytics"

    @property
    def patterns_dir(self) -> Path:
        return self.root / "patterns"

    @property
    def index_path(self) -> Path:
        return self.root / INDEX_FILE

    @property
    def tech_stats_path(self) -> Path:
        return self.analytics_dir / TECH_STATS_FILE

    def project_path(self, name: str) -> Path:
        return self.projects_dir / f"{_file_stem(name)}.json"

    def analytics_path(self, name: str) -> Path:
        return self.projects_dir / f"{_file_stem(name)}{ANALYTICS_SUFFIX}"

    def summary_path(self, name: str) -> Path:
        return self.projects_dir / f"{_file_stem(name)}{SUMMARY_SUFFIX}"

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def ensure_layout(self) -> None:
        """Create the directory tree and seed reference documents.

        Failures are logged; a missing directory later surfaces as a
        PersistenceError on the first write that needs it.
        """
        for directory in (self.root, *(self.root / d for d in SUBDIRECTORIES)):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.warning(f"Could not create {directory}: {e}")

        for relative, content in DEFAULT_DOCUMENTS.items():
            target = self.root / relative
            if target.exists():
                continue
            try:
                _write_text_atomic(target, content)
            except OSError as e:
                logger.warning(f"Could not seed {target}: {e}")

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def save_project(self, project: Project) -> None:
        """Write the project document and regenerate its summary."""
        await self._write(self.project_path(project.name), project.to_json() + "\n")
        await self._write(self.summary_path(project.name), render_project_summary(project))

    async def load_projects(self) -> list[Project]:
        def is_project_document(path: Path) -> bool:
            return not path.name.endswith(ANALYTICS_SUFFIX) and "EXAMPLE" not in path.name

        return await asyncio.to_thread(self._load_documents, Project, is_project_document)

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    async def save_project_analytics(self, record: ProjectWithAnalytics) -> None:
        await self._write(self.analytics_path(record.name), record.to_json() + "\n")

    async def load_project_analytics(self) -> list[ProjectWithAnalytics]:
        def is_analytics_document(path: Path) -> bool:
            return path.name.endswith(ANALYTICS_SUFFIX) and "EXAMPLE" not in path.name

        return await asyncio.to_thread(self._load_documents, ProjectWithAnalytics, is_analytics_document)

    async def save_tech_stats(self, stats: TechnologyStats) -> None:
        await self._write(self.tech_stats_path, stats.to_json() + "\n")

    async def load_tech_stats(self) -> Optional[TechnologyStats]:
        return await asyncio.to_thread(self._load_document, TechnologyStats, self.tech_stats_path)

    # ------------------------------------------------------------------
    # Index and patterns
    # ------------------------------------------------------------------

    async def write_index(self, content: str) -> None:
        await self._write(self.index_path, content)

    async def read_patterns(self) -> list[tuple[str, str]]:
        """Return (relative name, text) for every markdown pattern document."""
        return await asyncio.to_thread(self._read_patterns)

    def _read_patterns(self) -> list[tuple[str, str]]:
        if not self.patterns_dir.is_dir():
            return []
        documents = []
        for path in sorted(self.patterns_dir.glob("*.md")):
            try:
                documents.append((f"patterns/{path.name}", path.read_text(encoding="utf-8")))
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Could not read pattern file {path}: {e}")
        return documents

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _lock_for(self, path: Path) -> asyncio.Lock:
        lock = self._file_locks.get(path)
        if lock is None:
            lock = self._file_locks[path] = asyncio.Lock()
        return lock

    async def _write(self, path: Path, content: str) -> None:
        async with self._lock_for(path):
            try:
                await asyncio.to_thread(_write_text_atomic, path, content)
            except OSError as e:
                raise PersistenceError(f"could not write {path}: {e}", path=str(path)) from e

    def _load_documents(self, model: type[ModelT], accept: Callable[[Path], bool]) -> list[ModelT]:
        if not self.projects_dir.is_dir():
            return []
        documents = []
        for path in sorted(self.projects_dir.glob("*.json")):
            if not accept(path):
                continue
            document = self._load_document(model, path)
            if document is not None:
                documents.append(document)
        return documents

    def _load_document(self, model: type[ModelT], path: Path) -> Optional[ModelT]:
        try:
            return model.model_validate_json(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            logger.warning(f"Skipping unreadable document {path}: {e}")
            return None


def _file_stem(name: str) -> str:
    if not name or name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
        raise PersistenceError(f"invalid project file name: {name!r}")
    return name


def _write_text_atomic(path: Path, content: str) -> None:
    tmp_path = path.with_name(f".{path.name}.tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        f.write(content)
    os.replace(tmp_path, path)
