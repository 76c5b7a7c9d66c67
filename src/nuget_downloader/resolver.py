"""Selection of a concrete package version under a version constraint."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .versions import NuGetVersion

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .index import PackageIndex
    from .models import PackageRef
    from .versions import VersionRange

logger = logging.getLogger(__name__)


class PackageNotFoundError(LookupError):
    """Raised when no version of a package satisfies a request."""

    def __init__(self, package_id: str, constraint: str = "") -> None:
        self.package_id: str = package_id
        self.constraint: str = constraint
        msg = f"No version of {package_id} matches {constraint}" if constraint else f"Package {package_id} not found"
        super().__init__(msg)


def _highest(candidates: Iterable[PackageRef]) -> PackageRef | None:
    """The candidate with the highest version; the first one in index order wins ties."""
    best: PackageRef | None = None
    for candidate in candidates:
        if best is None or candidate.version > best.version:
            best = candidate
    return best


class VersionResolver:
    """Picks one version of a package from the candidates reported by a `PackageIndex`."""

    def __init__(self, index: PackageIndex) -> None:
        self.index: PackageIndex = index

    def candidates(self, package_id: str) -> list[PackageRef]:
        return self.index.find_packages(package_id)

    def resolve(self, package_id: str, version_string: str | None = None, *, include_prerelease: bool = False) -> PackageRef:
        """Resolve a root package: the latest version if no version is given, otherwise that exact version."""
        if version_string is None or not version_string.strip():
            return self.resolve_latest(package_id, include_prerelease=include_prerelease)
        return self.resolve_exact(package_id, version_string)

    def resolve_latest(self, package_id: str, *, include_prerelease: bool = False) -> PackageRef:
        """Return the newest version of a package.

        Without prereleases, only candidates that the index flags as the latest release are considered.

        Raises:
            PackageNotFoundError: if no candidate qualifies

        """
        candidates: Iterable[PackageRef] = self.candidates(package_id)
        if not include_prerelease:
            candidates = (c for c in candidates if not c.is_prerelease and c.is_latest_release)
        latest = _highest(candidates)
        if latest is None:
            raise PackageNotFoundError(package_id)
        logger.debug("Latest version of %s is %s", package_id, latest.version)
        return latest

    def resolve_exact(self, package_id: str, version_string: str) -> PackageRef:
        """Return the candidate with exactly this version.

        An explicit version is honoured even if it is a prerelease.

        Raises:
            InvalidVersionError: if `version_string` is not a valid version
            PackageNotFoundError: if the index has no such version

        """
        version = NuGetVersion(version_string)
        for candidate in self.candidates(package_id):
            if candidate.version == version:
                return candidate
        raise PackageNotFoundError(package_id, f"[{version}]")

    def resolve_in_range(
        self, package_id: str, version_range: VersionRange, *, include_prerelease: bool = False
    ) -> PackageRef:
        """Return the highest version within `version_range`.

        Raises:
            PackageNotFoundError: if no candidate is in range

        """
        candidates: Iterable[PackageRef] = self.candidates(package_id)
        if not include_prerelease:
            candidates = (c for c in candidates if not c.is_prerelease)
        best = _highest(c for c in candidates if c.version in version_range)
        if best is None:
            raise PackageNotFoundError(package_id, str(version_range))
        return best
