from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ConfigFormat(StrEnum):
    YAML = "yaml"
    JSON = "json"
    TOML = "toml"


class RepoType(StrEnum):
    MONOREPO = "monorepo"
    SINGLE_REPO = "single-repo"


class ResolvedConfig(BaseModel):
    """A fetched document, parsed into an ordered key-value mapping."""

    source: str
    format: ConfigFormat
    document: dict[str, Any]


class ChangelogConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    template: str = "keepachangelog"  # Builtin name, file path, or remote reference
    output_path: str | None = None
    package_path: bool | None = None


class GitConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    tag_template: str | None = None
    commit_template: str | None = None


class ChangeTypeConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    display_name: str = ""
    semver_bump: str = ""
    section: str | None = None


class Package(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = ""
    path: str = ""
    manifest: str = ""
    ecosystem: str = ""
    changelog_path: str | None = None


def default_change_types() -> list[ChangeTypeConfig]:
    return [
        ChangeTypeConfig(
            name="patch",
            display_name="🔧 Patch - Bug fixes and minor updates",
            semver_bump="patch",
            section="Fixed",
        ),
        ChangeTypeConfig(
            name="minor",
            display_name="✨ Minor - New features (backward compatible)",
            semver_bump="minor",
            section="Added",
        ),
        ChangeTypeConfig(
            name="major",
            display_name="💥 Major - Breaking changes",
            semver_bump="major",
            section="Changed",
        ),
    ]


class ProjectConfig(BaseModel):
    """Final, typed project configuration.

    Produced either from a single document or from a local document overlaid
    on an ``extends`` base. Unknown top-level keys are kept so nothing in the
    source documents is silently dropped.
    """

    model_config = ConfigDict(extra="allow")

    type: RepoType = RepoType.MONOREPO
    repo: str = "github.com/example/example-repo"
    extends: str | None = None
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    git: GitConfig = Field(default_factory=GitConfig)
    change_types: list[ChangeTypeConfig] = Field(default_factory=list)
    packages: list[Package] = Field(default_factory=list)
    package: Package | None = None

    def get_packages(self) -> list[Package]:
        if self.type is RepoType.MONOREPO:
            return list(self.packages)
        return [self.package] if self.package is not None else []

    def get_package(self, name: str) -> Package | None:
        for pkg in self.get_packages():
            if pkg.name == name:
                return pkg
        return None

    def get_change_types(self) -> list[ChangeTypeConfig]:
        return list(self.change_types) or default_change_types()
