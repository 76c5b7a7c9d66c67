"""Expansion of a package into the transitive closure of its dependencies."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from tqdm import tqdm

from .index import framework_identifier
from .models import ResolvedSet
from .progress import discard_progress, never_stop
from .resolver import PackageNotFoundError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .models import DependencySpec, PackageRef
    from .progress import ProgressSink, StopRequested
    from .resolver import VersionResolver

logger = logging.getLogger(__name__)


class MissingDependencyPolicy(str, Enum):
    """What to do when no version of a dependency satisfies its declared range."""

    SKIP = "skip"
    """Warn and leave the dependency, and everything below it, out of the resolved set."""
    ABORT = "abort"
    """Raise `PackageNotFoundError`, aborting the whole resolution."""


@dataclass(frozen=True)
class Edge:
    """A dependency edge examined during traversal.

    `child` is None when the dependency could not be resolved and was skipped.
    """

    parent: PackageRef
    spec: DependencySpec
    child: PackageRef | None
    is_new: bool = False

    def __str__(self) -> str:
        if self.child is None:
            return f"{self.parent.full_name} -> {self.spec}: no matching version, skipped."
        return f"{self.parent.full_name} -> {self.child.full_name}"


@dataclass(frozen=True)
class Resolution:
    packages: ResolvedSet
    cancelled: bool = False
    missing: tuple[tuple[PackageRef, DependencySpec], ...] = ()


class GraphTraversal:
    """A depth-first, pre-order walk of the dependency graph below a root package.

    The walk is driven by an explicit stack of `(package, remaining dependencies)` frames, so it can be
    advanced one edge at a time with `step()`. Every package is expanded at most once: a dependency that
    resolves to a package already in `packages` is not descended into, which also breaks cycles.
    """

    def __init__(self, builder: DependencyGraphBuilder, root: PackageRef) -> None:
        self.builder: DependencyGraphBuilder = builder
        self.packages: ResolvedSet = ResolvedSet()
        self.packages.add(root)
        self.cancelled: bool = False
        self.missing: list[tuple[PackageRef, DependencySpec]] = []
        self._stack: list[tuple[PackageRef, Iterator[DependencySpec]]] = [(root, self._dependencies(root))]

    def _dependencies(self, package: PackageRef) -> Iterator[DependencySpec]:
        return iter(package.dependencies_for(self.builder.frameworks))

    @property
    def done(self) -> bool:
        return not self._stack

    def step(self) -> Edge | None:
        """Examine the next dependency edge, or return None once the walk is finished or cancelled."""
        while self._stack:
            parent, remaining = self._stack[-1]
            spec = next(remaining, None)
            if spec is None:
                self._stack.pop()
                continue
            if self.builder.stop():
                logger.debug("Dependency traversal cancelled at %s", parent.full_name)
                self.cancelled = True
                self._stack.clear()
                return None
            return self._visit(parent, spec)
        return None

    def _visit(self, parent: PackageRef, spec: DependencySpec) -> Edge:
        try:
            child = self.builder.resolver.resolve_in_range(
                spec.package_id, spec.version_range, include_prerelease=self.builder.include_prerelease
            )
        except PackageNotFoundError:
            if self.builder.on_missing is MissingDependencyPolicy.ABORT:
                raise
            logger.warning("No version of %s satisfies %s (required by %s)", spec.package_id, spec.version_range, parent.full_name)
            self.missing.append((parent, spec))
            edge = Edge(parent=parent, spec=spec, child=None)
            self.builder.progress(str(edge))
            return edge
        is_new = self.packages.add(child)
        edge = Edge(parent=parent, spec=spec, child=child, is_new=is_new)
        self.builder.progress(str(edge))
        if is_new:
            self._stack.append((child, self._dependencies(child)))
        return edge

    def __iter__(self) -> Iterator[Edge]:
        while True:
            edge = self.step()
            if edge is None:
                return
            yield edge

    def result(self) -> Resolution:
        return Resolution(packages=self.packages, cancelled=self.cancelled, missing=tuple(self.missing))


class DependencyGraphBuilder:
    """Builds the set of packages required by a root package.

    The builder holds only configuration; each call to `build()` starts from an empty resolved set.
    """

    def __init__(  # noqa: PLR0913
        self,
        resolver: VersionResolver,
        *,
        include_prerelease: bool = False,
        frameworks: Iterable[str] = (),
        stop: StopRequested = never_stop,
        progress: ProgressSink = discard_progress,
        on_missing: MissingDependencyPolicy = MissingDependencyPolicy.SKIP,
        show_progress_bar: bool = False,
    ) -> None:
        """Initialize a dependency graph builder.

        Args:
            resolver: Version resolver used for every dependency edge
            include_prerelease: Whether dependency ranges may resolve to prerelease versions
            frameworks: Accepted target frameworks (identifiers or monikers); empty accepts every framework
            stop: Polled before each dependency edge; traversal ends when it returns True
            progress: Receives a line for every dependency edge
            on_missing: What to do with dependencies no version satisfies
            show_progress_bar: Whether to display a transient progress bar

        """
        self.resolver: VersionResolver = resolver
        self.include_prerelease: bool = include_prerelease
        # "net6.0" and ".NETCoreApp3.1" both accept .NETCoreApp groups
        self.frameworks: frozenset[str] = frozenset(filter(None, map(framework_identifier, frameworks)))
        self.stop: StopRequested = stop
        self.progress: ProgressSink = progress
        self.on_missing: MissingDependencyPolicy = on_missing
        self.show_progress_bar: bool = show_progress_bar

    def traverse(self, root: PackageRef) -> GraphTraversal:
        return GraphTraversal(self, root)

    def build(self, root: PackageRef) -> Resolution:
        """Resolve every package required by `root`, which is always the first entry of the result."""
        traversal = self.traverse(root)
        with tqdm(
            desc=f"resolving {root.full_name}", leave=False, unit=" dependencies", disable=not self.show_progress_bar
        ) as t:
            for _ in traversal:
                t.update(1)
        resolution = traversal.result()
        logger.debug("Resolved %d packages for %s", len(resolution.packages), root.full_name)
        return resolution
