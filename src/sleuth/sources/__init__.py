"""Search and page collaborators used by the tool gateway."""

from sleuth.sources.pages import PageExtractor, PageFetcher, cap_text, html_to_text
from sleuth.sources.search import GroundedDiscovery, SerperSearch

__all__ = [
    "SerperSearch",
    "GroundedDiscovery",
    "PageFetcher",
    "PageExtractor",
    "cap_text",
    "html_to_text",
]
