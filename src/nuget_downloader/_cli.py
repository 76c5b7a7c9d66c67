"""Command-line interface for nuget-downloader."""

from __future__ import annotations

import logging
import signal
import sys
from types import FrameType
from typing import Any

from .config import Settings
from .download import DownloadOrchestrator
from .fetch import RunStatus, fetch_package
from .index import NuGetV3Index, TransportError
from .logger import setup_logger
from .progress import CancellationToken, LoggingProgress
from .resolution import MissingDependencyPolicy

logger = logging.getLogger(__name__)

EXIT_CODES = {
    RunStatus.DONE: 0,
    RunStatus.FAILED: 1,
    RunStatus.STOPPED: 130,
}


def _install_interrupt_handler(token: CancellationToken) -> Any:
    """Make the first Ctrl-C request a graceful stop; a second one interrupts immediately."""

    def handler(signum: int, frame: FrameType | None) -> None:  # noqa: ARG001
        if token.is_cancelled:
            raise KeyboardInterrupt
        logger.warning("Stopping after the current step (press Ctrl-C again to abort)")
        token.cancel()

    return signal.signal(signal.SIGINT, handler)


def main(argv: list[str] | None = None) -> int:
    settings = Settings(_cli_parse_args=argv if argv is not None else True)
    setup_logger(settings.log_level)

    logger.debug("Starting nuget-downloader with settings: %s", settings)

    if not settings.package.strip():
        logger.error("No package given; pass one with --package")
        return EXIT_CODES[RunStatus.FAILED]

    token = CancellationToken()
    previous_handler = _install_interrupt_handler(token)
    try:
        with NuGetV3Index(settings.source, timeout=settings.timeout) as index:
            downloader = DownloadOrchestrator(index.session, timeout=settings.timeout, show_progress_bar=True)
            try:
                result = fetch_package(
                    settings.package.strip(),
                    settings.version,
                    index=index,
                    include_prerelease=settings.prerelease,
                    directory=settings.directory,
                    frameworks=settings.framework,
                    stop=token,
                    progress=LoggingProgress(),
                    on_missing=(
                        MissingDependencyPolicy.ABORT if settings.fail_on_missing else MissingDependencyPolicy.SKIP
                    ),
                    downloader=downloader,
                    download=not settings.dry_run,
                    show_progress_bar=True,
                )
            except TransportError:
                logger.exception("Download of %s failed; run again to resume", settings.package)
                return EXIT_CODES[RunStatus.FAILED]
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    if settings.dry_run and result.resolution is not None:
        sys.stdout.write(result.resolution.packages.dumps() + "\n")

    if result.resolution is not None and result.resolution.missing:
        logger.warning(
            "%d dependencies could not be resolved: %s",
            len(result.resolution.missing),
            ", ".join(str(spec) for _, spec in result.resolution.missing),
        )

    return EXIT_CODES[result.status]
