"""Configuration settings for nuget-downloader."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    CliImplicitFlag,
    SettingsConfigDict,
)

from .fetch import DEFAULT_DIRECTORY
from .index import DEFAULT_SOURCE


class Settings(BaseSettings):
    """Settings for nuget-downloader."""

    package: str = Field(
        default="",
        description="""ID of the package to download, e.g. `Newtonsoft.Json`.""",
    )
    version: str = Field(
        default="",
        description="""Exact version of the package to download. If not
        provided, the latest release is used.""",
    )
    prerelease: CliImplicitFlag[bool] = Field(
        default=False,
        description="""Allow prerelease versions when picking the latest
        version of the package and of its dependencies.""",
    )
    directory: Path = Field(
        default=DEFAULT_DIRECTORY,
        description="""Directory to download the packages to. It is created
        if it does not exist; packages already present are not downloaded
        again.""",
    )
    framework: list[str] = Field(
        default_factory=list,
        description="""Target framework identifier(s) whose dependencies should
        be followed, e.g. `.NETStandard`, `.NETFramework` or a moniker such as
        `net6.0` (followed as `.NETCoreApp`). If not provided,
        the dependencies of every framework are followed.""",
    )
    source: str = Field(
        default=DEFAULT_SOURCE,
        description="""URL of the NuGet V3 service index to query.""",
    )
    fail_on_missing: CliImplicitFlag[bool] = Field(
        default=False,
        description="""Stop with an error when a dependency can not be
        satisfied, instead of skipping it with a warning.""",
    )
    dry_run: CliImplicitFlag[bool] = Field(
        default=False,
        description="""Only resolve the dependencies and print them as JSON;
        do not download anything.""",
    )
    timeout: float | None = Field(
        default=None,
        description="""Timeout in seconds for each HTTP request. By default
        requests do not time out.""",
    )
    log_level: str = Field(default="info", description="Log level")

    model_config = SettingsConfigDict(
        cli_parse_args=True,
        cli_prog_name="nuget-downloader",
        cli_kebab_case=True,
        env_prefix="NUGET_DOWNLOADER_",
    )
