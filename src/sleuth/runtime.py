"""Construction and teardown of the research collaborators.

``open_runtime`` builds every HTTP client once, wires them into a gateway,
compressor and agent, and closes them all on exit.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sleuth.compression import HistoryCompressor
from sleuth.export import CsvExporter, NullExporter
from sleuth.llm.client import OpenAIClient
from sleuth.llm.gemini import GeminiClient
from sleuth.memory.store import MemoryStore
from sleuth.orchestrator.loop import ResearchAgent
from sleuth.sources.pages import PageExtractor, PageFetcher
from sleuth.sources.search import GroundedDiscovery, SerperSearch
from sleuth.toolkit.gateway import ToolGateway

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sleuth.orchestrator.config import AgentConfig
    from sleuth.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    """Live collaborators for one program run."""

    agent: ResearchAgent
    memory: MemoryStore
    generator: GeminiClient


@contextmanager
def open_runtime(
    settings: Settings,
    config: AgentConfig | None = None,
    *,
    export_dir: str | Path | None = None,
) -> Iterator[Runtime]:
    """Build the agent and its collaborators, closing them on exit.

    Raises:
        LLMConfigError: If the reasoning engine key is missing.
    """
    settings.require_engine()
    for name in settings.missing_optional():
        logger.warning("%s not set; tools that need it will report unavailability", name)

    llm = OpenAIClient(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        default_model=settings.model,
    )
    gemini = GeminiClient(api_key=settings.gemini_api_key, model=settings.gemini_model)
    search = SerperSearch(api_key=settings.serper_api_key)
    fetcher = PageFetcher(jina_api_key=settings.jina_api_key)

    try:
        gateway = ToolGateway(
            searcher=search,
            discoverer=GroundedDiscovery(gemini),
            extractor=PageExtractor(fetcher, gemini),
            reader=fetcher,
        )
        memory = MemoryStore(settings.memory_path)
        exporter = CsvExporter(export_dir) if export_dir else NullExporter()
        agent = ResearchAgent(
            llm,
            gateway,
            memory,
            compressor=HistoryCompressor(gemini),
            exporter=exporter,
            config=config,
        )
        yield Runtime(agent=agent, memory=memory, generator=gemini)
    finally:
        for client in (fetcher, search, gemini, llm):
            client.close()
