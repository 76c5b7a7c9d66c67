"""The `nuget-downloader` APIs."""

__version__ = "0.1.0"

from .download import DownloadOrchestrator, DownloadReport, archive_name
from .fetch import RunResult, RunStatus, fetch_package
from .index import InMemoryPackageIndex, NuGetV3Index, PackageIndex, TransportError, framework_identifier
from .models import DependencySet, DependencySpec, PackageRef, ResolvedSet
from .progress import CancellationToken, LoggingProgress, ProgressLog
from .resolution import DependencyGraphBuilder, Edge, GraphTraversal, MissingDependencyPolicy, Resolution
from .resolver import PackageNotFoundError, VersionResolver
from .versions import InvalidVersionError, NuGetVersion, VersionRange

__all__ = [
    "CancellationToken",
    "DependencyGraphBuilder",
    "DependencySet",
    "DependencySpec",
    "DownloadOrchestrator",
    "DownloadReport",
    "Edge",
    "GraphTraversal",
    "InMemoryPackageIndex",
    "InvalidVersionError",
    "LoggingProgress",
    "MissingDependencyPolicy",
    "NuGetV3Index",
    "NuGetVersion",
    "PackageIndex",
    "PackageNotFoundError",
    "PackageRef",
    "ProgressLog",
    "Resolution",
    "ResolvedSet",
    "RunResult",
    "RunStatus",
    "TransportError",
    "VersionRange",
    "VersionResolver",
    "archive_name",
    "fetch_package",
    "framework_identifier",
]
