"""In-progress artifact records built by the grouper and filled by the fetcher."""

from __future__ import annotations

from dataclasses import dataclass, field

from tfsassets.models.files import FileDescriptor


@dataclass
class RuleRecord:
    name: str
    script_file: FileDescriptor | None = None
    metadata_file: FileDescriptor | None = None
    script: str | None = None
    metadata: str | None = None

    @property
    def has_script(self) -> bool:
        return self.script_file is not None

    @property
    def has_metadata(self) -> bool:
        return self.metadata_file is not None

    def files(self) -> list[FileDescriptor]:
        return [f for f in (self.script_file, self.metadata_file) if f is not None]


@dataclass
class DatabaseRecord:
    """A custom database connection: stage scripts plus an optional settings blob."""

    name: str
    script_files: dict[str, FileDescriptor] = field(default_factory=dict)
    settings_file: FileDescriptor | None = None
    scripts: dict[str, str] = field(default_factory=dict)
    settings: str | None = None

    def files(self) -> list[FileDescriptor]:
        files = list(self.script_files.values())
        if self.settings_file is not None:
            files.append(self.settings_file)
        return files


@dataclass
class TemplateRecord:
    """A page or email template: HTML body plus an optional JSON sidecar."""

    name: str
    html_file: FileDescriptor | None = None
    metadata_file: FileDescriptor | None = None
    html: str | None = None
    metadata: str | None = None

    @property
    def has_metadata(self) -> bool:
        return self.metadata_file is not None

    def files(self) -> list[FileDescriptor]:
        return [f for f in (self.html_file, self.metadata_file) if f is not None]


@dataclass
class ConfigurableRecord:
    """A JSON-configured entity (client, grant, connection, ...)."""

    name: str
    config_file: FileDescriptor | None = None
    metadata_file: FileDescriptor | None = None
    config: str | None = None
    metadata: str | None = None

    @property
    def has_metadata(self) -> bool:
        return self.metadata_file is not None

    def files(self) -> list[FileDescriptor]:
        return [f for f in (self.config_file, self.metadata_file) if f is not None]


ArtifactRecord = RuleRecord | DatabaseRecord | TemplateRecord | ConfigurableRecord
