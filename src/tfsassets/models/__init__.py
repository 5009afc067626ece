"""Domain models for repository extraction."""

from tfsassets.models.assets import (
    CanonicalAssetDocument,
    ConfigurableAsset,
    DatabaseAsset,
    EmailTemplateAsset,
    PageAsset,
    RuleAsset,
    RulesConfigAsset,
)
from tfsassets.models.errors import (
    BranchNotFoundError,
    DownloadError,
    ExtractionError,
    MalformedContentError,
    RetrievalError,
    UnsupportedConfigurationError,
)
from tfsassets.models.files import (
    Category,
    Classification,
    FetchedFile,
    FileDescriptor,
    ResolvedRevision,
)
from tfsassets.models.records import (
    ConfigurableRecord,
    DatabaseRecord,
    RuleRecord,
    TemplateRecord,
)

__all__ = [
    "BranchNotFoundError",
    "CanonicalAssetDocument",
    "Category",
    "Classification",
    "ConfigurableAsset",
    "ConfigurableRecord",
    "DatabaseAsset",
    "DatabaseRecord",
    "DownloadError",
    "EmailTemplateAsset",
    "ExtractionError",
    "FetchedFile",
    "FileDescriptor",
    "MalformedContentError",
    "PageAsset",
    "ResolvedRevision",
    "RetrievalError",
    "RuleAsset",
    "RuleRecord",
    "RulesConfigAsset",
    "TemplateRecord",
    "UnsupportedConfigurationError",
]
