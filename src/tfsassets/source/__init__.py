"""Source-control backends."""

# Import backends to trigger registration
import tfsassets.source.git as _git  # noqa: F401
import tfsassets.source.tfvc as _tfvc  # noqa: F401
from tfsassets.source.base import ChangeDetector, ContentFetcher, SourceBackend, TreeRetriever
from tfsassets.source.connection import ConnectionFactory
from tfsassets.source.registry import SourceRegistry

__all__ = [
    "ChangeDetector",
    "ConnectionFactory",
    "ContentFetcher",
    "SourceBackend",
    "SourceRegistry",
    "TreeRetriever",
]
