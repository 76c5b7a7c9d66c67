"""A complete run: resolve a package, expand its dependencies, and download everything."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from .download import DownloadOrchestrator
from .progress import discard_progress, never_stop
from .resolution import DependencyGraphBuilder, MissingDependencyPolicy
from .resolver import PackageNotFoundError, VersionResolver
from .versions import InvalidVersionError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .download import DownloadReport
    from .index import PackageIndex
    from .progress import ProgressSink, StopRequested
    from .resolution import Resolution

logger = logging.getLogger(__name__)

DEFAULT_DIRECTORY = Path("download")


class RunStatus(str, Enum):
    DONE = "done"
    STOPPED = "stopped"
    FAILED = "failed"


@dataclass
class RunResult:
    status: RunStatus
    resolution: Resolution | None = None
    downloads: DownloadReport | None = None
    error: Exception | None = None


def fetch_package(  # noqa: PLR0913
    package_id: str,
    version: str | None = None,
    *,
    index: PackageIndex,
    include_prerelease: bool = False,
    directory: Path | str = DEFAULT_DIRECTORY,
    frameworks: Iterable[str] = (),
    stop: StopRequested = never_stop,
    progress: ProgressSink = discard_progress,
    on_missing: MissingDependencyPolicy = MissingDependencyPolicy.SKIP,
    downloader: DownloadOrchestrator | None = None,
    download: bool = True,
    show_progress_bar: bool = False,
) -> RunResult:
    """Download `package_id` and every package it depends on into `directory`.

    `stop` is polled before resolution starts, after it finishes, before every dependency edge and
    before every download; once it returns True the run ends with `RunStatus.STOPPED` and no further
    downloads are started. With `download=False` the run ends after resolution.

    Invalid or unknown root packages end the run with `RunStatus.FAILED`. Transport errors are not
    caught and propagate to the caller.
    """
    if stop():
        progress("Stopped.")
        return RunResult(status=RunStatus.STOPPED)

    resolver = VersionResolver(index)
    try:
        root = resolver.resolve(package_id, version, include_prerelease=include_prerelease)
    except InvalidVersionError as e:
        logger.debug("%s", e)
        progress("Unable to parse package version.")
        return RunResult(status=RunStatus.FAILED, error=e)
    except PackageNotFoundError as e:
        logger.debug("%s", e)
        progress("Package not found.")
        return RunResult(status=RunStatus.FAILED, error=e)
    progress(root.full_name)

    builder = DependencyGraphBuilder(
        resolver,
        include_prerelease=include_prerelease,
        frameworks=frameworks,
        stop=stop,
        progress=progress,
        on_missing=on_missing,
        show_progress_bar=show_progress_bar,
    )
    try:
        resolution = builder.build(root)
    except PackageNotFoundError as e:
        # only raised for dependencies under MissingDependencyPolicy.ABORT
        progress(f"{e!s}.")
        return RunResult(status=RunStatus.FAILED, error=e)

    if resolution.cancelled or stop():
        progress("Stopped.")
        return RunResult(status=RunStatus.STOPPED, resolution=resolution)

    if not download:
        progress("Done.")
        return RunResult(status=RunStatus.DONE, resolution=resolution)

    progress(f"{len(resolution.packages)} packages to download.")

    if downloader is None:
        downloader = DownloadOrchestrator(show_progress_bar=show_progress_bar)
    report = downloader.download(directory, resolution.packages, stop=stop, progress=progress)

    if report.cancelled or stop():
        progress("Stopped.")
        return RunResult(status=RunStatus.STOPPED, resolution=resolution, downloads=report)

    progress("Done.")
    return RunResult(status=RunStatus.DONE, resolution=resolution, downloads=report)
