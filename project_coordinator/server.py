"""
Project Coordinator server
Long-lived stdio process tracking a portfolio of software projects

Architecture:
- KnowledgeBase: JSON/markdown documents on disk
- AnalyticsEngine: status timelines, activity, technology trends, health
- ProjectStore: serialized project map, the single writer
- ToolDispatcher + ProtocolEngine: JSON-RPC over stdin/stdout
"""

import asyncio
import logging
import sys
from dataclasses import dataclass
from typing import Callable, Optional, TextIO

from .analytics.engine import AnalyticsEngine
from .config import CoordinatorConfig
from .protocol.engine import ProtocolEngine
from .protocol.tools import ToolDispatcher
from .storage.knowledge_base import KnowledgeBase
from .store.project_store import ProjectStore
from .utils.dates import utcnow
from .utils.logging import setup_logging
from .utils.validators import SecurityValidator

logger = logging.getLogger(__name__)


@dataclass
class CoordinatorContext:
    """The wired component graph for one process."""

    config: CoordinatorConfig
    knowledge_base: KnowledgeBase
    analytics: AnalyticsEngine
    store: ProjectStore
    dispatcher: ToolDispatcher


def build_context(config: CoordinatorConfig, clock: Callable = utcnow) -> CoordinatorContext:
    """
    Construct every component from the configuration

    Nothing is read from disk except the security configuration; call
    ``ProjectStore.initialize`` (or use ``open_context``) before serving.
    """
    config.load_security()

    knowledge_base = KnowledgeBase(config.knowledge_base_path)
    analytics = AnalyticsEngine(
        knowledge_base,
        clock=clock,
        heat_map_days=config.heat_map_days,
        health_window_days=config.health_window_days,
    )
    store = ProjectStore(knowledge_base, analytics, clock=clock)

    validator = SecurityValidator(config.security) if config.validation_enabled else None
    if validator is None:
        logger.warning("Input validation is disabled")

    return CoordinatorContext(
        config=config,
        knowledge_base=knowledge_base,
        analytics=analytics,
        store=store,
        dispatcher=ToolDispatcher(store, validator),
    )


async def open_context(config: CoordinatorConfig, clock: Callable = utcnow) -> CoordinatorContext:
    """Build the component graph and hydrate it from the knowledge base."""
    context = build_context(config, clock)
    await context.store.initialize()
    return context


async def run_server(
    config: CoordinatorConfig,
    input_stream: Optional[TextIO] = None,
    output: Optional[TextIO] = None,
) -> None:
    """Serve JSON-RPC until the input stream is exhausted."""
    context = await open_context(config)
    if config.debug:
        logger.info(config.display())
    engine = ProtocolEngine(context.dispatcher, config, output)
    logger.info(f"{config.server_name} v{config.server_version} serving on stdio")
    await engine.serve(input_stream)


def main(config: Optional[CoordinatorConfig] = None) -> int:
    """Process entry point; returns the exit status."""
    config = config or CoordinatorConfig.from_env()
    setup_logging(config)

    try:
        asyncio.run(run_server(config))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except Exception as e:
        logger.exception("Server failed")
        print(f"project-coordinator: fatal error: {e}", file=sys.stderr)
        return 1
    return 0
