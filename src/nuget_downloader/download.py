"""Downloading of resolved package archives."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import requests
from tqdm import tqdm

from .index import TransportError
from .progress import discard_progress, never_stop

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .models import PackageRef
    from .progress import ProgressSink, StopRequested

logger = logging.getLogger(__name__)

ARCHIVE_EXTENSION = "nupkg"
CHUNK_SIZE = 64 * 1024

# NuGet package id grammar; anything else could name a path outside the download directory
_PACKAGE_ID_RE = re.compile(r"\w+(?:[_.-]\w+)*")


def archive_name(package: PackageRef) -> str:
    """The file name a package is stored under: `<id>.<version>.nupkg`.

    Raises:
        TransportError: if the index reported an id that is not a valid NuGet package id

    """
    if not _PACKAGE_ID_RE.fullmatch(package.id):
        msg = f"Invalid package id reported by the index: {package.id!r}"
        raise TransportError(msg)
    return f"{package.id}.{package.version}.{ARCHIVE_EXTENSION}"


def _content_length(response: requests.Response) -> int | None:
    try:
        return int(response.headers.get("Content-Length", 0)) or None
    except (TypeError, ValueError):
        logger.debug("Ignoring invalid Content-Length %r", response.headers.get("Content-Length"))
        return None


@dataclass
class DownloadReport:
    downloaded: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    cancelled: bool = False


class DownloadOrchestrator:
    """Fetches package archives into a directory, skipping archives that are already there.

    A package counts as downloaded if and only if its archive exists, so an interrupted run can simply
    be started again. Archives are streamed to a temporary `.part` file and only moved into place once
    complete.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout: float | None = None,
        stop: StopRequested = never_stop,
        progress: ProgressSink = discard_progress,
        show_progress_bar: bool = False,
    ) -> None:
        self.session: requests.Session = session if session is not None else requests.Session()
        self.timeout: float | None = timeout
        self.stop: StopRequested = stop
        self.progress: ProgressSink = progress
        self.show_progress_bar: bool = show_progress_bar

    def download(
        self,
        directory: Path | str,
        packages: Iterable[PackageRef],
        *,
        stop: StopRequested | None = None,
        progress: ProgressSink | None = None,
    ) -> DownloadReport:
        """Download every package in order.

        `stop` and `progress` override the orchestrator's own for this call only.

        Raises:
            TransportError: if a download fails; archives fetched so far are kept

        """
        stop = stop if stop is not None else self.stop
        progress = progress if progress is not None else self.progress
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        report = DownloadReport()
        for package in packages:
            if stop():
                report.cancelled = True
                break
            path = directory / archive_name(package)
            if path.exists():
                progress(f"{path} already downloaded.")
                report.skipped.append(path)
                continue
            progress(f"downloading {package.id} {package.version}")
            self.fetch(package, path)
            report.downloaded.append(path)
        return report

    def fetch(self, package: PackageRef, path: Path) -> None:
        """Stream the archive of `package` to `path`."""
        if not package.download_url:
            msg = f"{package.full_name} has no download URL"
            raise TransportError(msg)
        partial = path.with_name(path.name + ".part")
        logger.debug("GET %s -> %s", package.download_url, path)
        try:
            response = self.session.get(package.download_url, stream=True, timeout=self.timeout)
            try:
                response.raise_for_status()
                total = _content_length(response)
                with (
                    partial.open("wb") as f,
                    tqdm(
                        desc=package.full_name,
                        total=total,
                        unit="B",
                        unit_scale=True,
                        leave=False,
                        disable=not self.show_progress_bar,
                    ) as t,
                ):
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        f.write(chunk)
                        t.update(len(chunk))
            finally:
                response.close()
            os.replace(partial, path)
        except (requests.RequestException, OSError) as e:
            partial.unlink(missing_ok=True)
            msg = f"Error downloading {package.full_name} from {package.download_url}: {e!s}"
            raise TransportError(msg) from e
