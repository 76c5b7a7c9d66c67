"""Core data models for dependency resolution."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .versions import NuGetVersion, VersionRange

PackageKey = tuple[str, "NuGetVersion"]


@dataclass(frozen=True)
class DependencySpec:
    """A dependency on another package, constrained to a range of versions."""

    package_id: str
    version_range: VersionRange

    def __str__(self) -> str:
        return f"{self.package_id} {self.version_range}"


@dataclass(frozen=True)
class DependencySet:
    """Dependencies that apply to a target framework, or to every framework when `target_framework` is None."""

    target_framework: str | None = None
    dependencies: tuple[DependencySpec, ...] = ()

    def applies_to(self, frameworks: Iterable[str]) -> bool:
        """Check if this set applies given the accepted framework identifiers.

        An empty collection of frameworks accepts every framework.
        """
        if self.target_framework is None:
            return True
        accepted = {f.lower() for f in frameworks}
        return not accepted or self.target_framework.lower() in accepted


@dataclass(frozen=True)
class PackageRef:
    """A concrete version of a package as reported by the package index."""

    id: str
    version: NuGetVersion
    title: str = ""
    is_latest_release: bool = False
    download_url: str = ""
    dependency_sets: tuple[DependencySet, ...] = ()

    @property
    def key(self) -> PackageKey:
        """Identity of this package; NuGet package ids are case-insensitive."""
        return self.id.lower(), self.version

    @property
    def is_prerelease(self) -> bool:
        return self.version.is_prerelease

    @property
    def full_name(self) -> str:
        return f"{self.id} {self.version}"

    def dependencies_for(self, frameworks: Iterable[str] = ()) -> list[DependencySpec]:
        """Return the dependencies that apply to the accepted frameworks, in declaration order."""
        frameworks = list(frameworks)
        return [
            dep
            for dependency_set in self.dependency_sets
            if dependency_set.applies_to(frameworks)
            for dep in dependency_set.dependencies
        ]

    def to_obj(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "version": str(self.version),
            "title": self.title,
            "prerelease": self.is_prerelease,
            "latest_release": self.is_latest_release,
            "download_url": self.download_url,
            "dependency_sets": [
                {
                    "target_framework": dependency_set.target_framework,
                    "dependencies": {dep.package_id: str(dep.version_range) for dep in dependency_set.dependencies},
                }
                for dependency_set in self.dependency_sets
            ],
        }

    def __str__(self) -> str:
        return self.full_name


@dataclass
class ResolvedSet:
    """Packages selected for download, unique by identity and kept in discovery order.

    The set only ever grows; entries are never removed or reordered.
    """

    _packages: dict[PackageKey, PackageRef] = field(default_factory=dict)

    def add(self, package: PackageRef) -> bool:
        """Add a package, returning False if a package with the same identity is already present."""
        if package.key in self._packages:
            return False
        self._packages[package.key] = package
        return True

    def get(self, key: PackageKey) -> PackageRef | None:
        return self._packages.get(key)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, PackageRef):
            return item.key in self._packages
        return item in self._packages

    def __iter__(self) -> Iterator[PackageRef]:
        return iter(self._packages.values())

    def __len__(self) -> int:
        return len(self._packages)

    def to_obj(self) -> list[dict[str, Any]]:
        return [package.to_obj() for package in self]

    def dumps(self) -> str:
        return json.dumps(self.to_obj(), indent=4)

    def __str__(self) -> str:
        return "[" + ", ".join(package.full_name for package in self) + "]"
