"""Tests for domain models and the error taxonomy."""

from __future__ import annotations

from tfsassets.models import (
    BranchNotFoundError,
    CanonicalAssetDocument,
    Category,
    ConfigurableAsset,
    DownloadError,
    ExtractionError,
    FileDescriptor,
    RetrievalError,
    RuleAsset,
    UnsupportedConfigurationError,
)
from tfsassets.models.records import ConfigurableRecord, RuleRecord


class TestCategory:
    def test_values(self) -> None:
        assert Category.RULES == "rules"
        assert Category.EMAIL_TEMPLATES == "emailTemplates"
        assert Category.RULES_CONFIGS == "rulesConfigs"

    def test_order(self) -> None:
        assert list(Category)[:3] == [Category.RULES, Category.DATABASES, Category.PAGES]


class TestFileDescriptor:
    def test_filename(self) -> None:
        assert FileDescriptor(path="a/b/c.js", content_id="1").filename == "c.js"

    def test_immutable_and_hashable(self) -> None:
        file = FileDescriptor(path="a.js", content_id="1", size=3)
        assert {file, FileDescriptor(path="a.js", content_id="1", size=3)} == {file}


class TestRecords:
    def test_rule_files(self) -> None:
        script = FileDescriptor(path="rules/a.js", content_id="1")
        record = RuleRecord(name="a", script_file=script)
        assert record.files() == [script]
        assert record.has_script and not record.has_metadata

    def test_configurable_without_files(self) -> None:
        assert ConfigurableRecord(name="x").files() == []


class TestDocument:
    def test_empty_document(self) -> None:
        assets = CanonicalAssetDocument().to_assets()
        assert list(assets) == [str(c) for c in Category]
        assert assets["emailProvider"] is None
        assert assets["rulesConfigs"] == []

    def test_populate_by_alias(self) -> None:
        document = CanonicalAssetDocument.model_validate(
            {"rules": [RuleAsset(name="r")], "resourceServers": [ConfigurableAsset(name="api", identifier="x")]}
        )
        assert document.resource_servers[0].model_dump() == {"name": "api", "identifier": "x"}
        assert document.rules[0].stage == "login_success"


class TestErrors:
    def test_hierarchy(self) -> None:
        assert issubclass(BranchNotFoundError, RetrievalError)
        assert issubclass(RetrievalError, ExtractionError)
        assert issubclass(DownloadError, ExtractionError)
        assert issubclass(UnsupportedConfigurationError, ExtractionError)

    def test_messages(self) -> None:
        assert str(BranchNotFoundError("dev")) == "Branch 'dev' not found"
        assert str(DownloadError("rules/a.js")) == "Error downloading 'rules/a.js'"
        error = UnsupportedConfigurationError("backend type", "svn", ["git", "tfvc"])
        assert str(error) == "Unsupported backend type 'svn'. Available: git, tfvc"
