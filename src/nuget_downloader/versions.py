"""NuGet version values and version ranges."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering

from semantic_version import Version

_VERSION_RE = re.compile(
    r"^(?P<numbers>\d+(?:\.\d+){0,3})"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)

_NO_PRERELEASE = Version(major=0, minor=0, patch=0, prerelease=(), build=())


class InvalidVersionError(ValueError):
    """Raised when a version or version range string can not be parsed."""


@total_ordering
class NuGetVersion:
    """A NuGet package version.

    NuGet versions have up to four numeric parts (``major.minor.patch.revision``)
    and an optional SemVer 2.0 prerelease label. Missing numeric parts are zero,
    a release sorts above any prerelease with the same numbers, and labels are
    compared case-insensitively. Build metadata does not take part in ordering.
    """

    def __init__(self, version_string: str) -> None:
        """Parse a version string.

        Raises:
            InvalidVersionError: if the string is not a NuGet version

        """
        text = version_string.strip() if isinstance(version_string, str) else ""
        match = _VERSION_RE.match(text)
        if match is None:
            msg = f"Invalid NuGet version: {version_string!r}"
            raise InvalidVersionError(msg)
        numbers = [int(part) for part in match.group("numbers").split(".")]
        numbers.extend([0] * (4 - len(numbers)))
        self.major, self.minor, self.patch, self.revision = numbers
        prerelease = match.group("prerelease")
        self.prerelease: tuple[str, ...] = tuple(prerelease.split(".")) if prerelease else ()
        build = match.group("build")
        self.build: tuple[str, ...] = tuple(build.split(".")) if build else ()
        self.version_string: str = text
        try:
            # semantic_version implements the SemVer 2.0 identifier precedence rules; NuGet also
            # accepts numeric identifiers with leading zeros ("beta.01"), which semver rejects
            self._prerelease_key = (
                Version(
                    major=0,
                    minor=0,
                    patch=0,
                    prerelease=tuple(str(int(label)) if label.isdigit() else label.lower() for label in self.prerelease),
                    build=(),
                )
                if self.prerelease
                else _NO_PRERELEASE
            )
        except ValueError as e:
            msg = f"Invalid NuGet version: {version_string!r}"
            raise InvalidVersionError(msg) from e

    @classmethod
    def parse(cls, version_string: str) -> NuGetVersion:
        return cls(version_string)

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    @property
    def normalized(self) -> str:
        """The normalized form NuGet uses in URLs and registration data."""
        ret = f"{self.major}.{self.minor}.{self.patch}"
        if self.revision:
            ret += f".{self.revision}"
        if self.prerelease:
            ret += "-" + ".".join(self.prerelease)
        return ret

    def _key(self) -> tuple[int, int, int, int, Version]:
        return self.major, self.minor, self.patch, self.revision, self._prerelease_key

    def __eq__(self, other: object) -> bool:
        if isinstance(other, NuGetVersion):
            return self._key() == other._key()
        return NotImplemented

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash((self.major, self.minor, self.patch, self.revision, self._prerelease_key))

    def __str__(self) -> str:
        return self.version_string

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.version_string!r})"


@dataclass(frozen=True)
class VersionRange:
    """An interval of versions, as used by NuGet dependency declarations.

    An absent bound means the range is unbounded on that side.
    """

    min_version: NuGetVersion | None = None
    min_inclusive: bool = False
    max_version: NuGetVersion | None = None
    max_inclusive: bool = False

    @classmethod
    def parse(cls, range_string: str | None) -> VersionRange:
        """Parse NuGet interval notation.

        For example:
            ``1.0``        1.0 <= x
            ``[1.0]``      x == 1.0
            ``(1.0,)``     1.0 < x
            ``[1.0,2.0)``  1.0 <= x < 2.0
            ``(,1.0]``     x <= 1.0
            ``(,)``        any version (as does an empty string)

        Raises:
            InvalidVersionError: if the range is malformed

        """
        text = (range_string or "").strip()
        if not text:
            return cls()
        if text[0] not in "[(":
            return cls(min_version=NuGetVersion(text), min_inclusive=True)
        if len(text) < 3 or text[-1] not in "])":  # noqa: PLR2004
            msg = f"Invalid version range: {range_string!r}"
            raise InvalidVersionError(msg)
        min_inclusive = text[0] == "["
        max_inclusive = text[-1] == "]"
        body = text[1:-1]
        if "," not in body:
            # "[1.0]" pins a single version
            if not (min_inclusive and max_inclusive):
                msg = f"Invalid version range: {range_string!r}"
                raise InvalidVersionError(msg)
            version = NuGetVersion(body)
            return cls(min_version=version, min_inclusive=True, max_version=version, max_inclusive=True)
        parts = body.split(",")
        if len(parts) != 2:  # noqa: PLR2004
            msg = f"Invalid version range: {range_string!r}"
            raise InvalidVersionError(msg)
        low, high = (part.strip() for part in parts)
        min_version = NuGetVersion(low) if low else None
        max_version = NuGetVersion(high) if high else None
        if min_version is not None and max_version is not None and max_version < min_version:
            msg = f"Invalid version range: {range_string!r}"
            raise InvalidVersionError(msg)
        return cls(
            min_version=min_version,
            min_inclusive=min_inclusive and min_version is not None,
            max_version=max_version,
            max_inclusive=max_inclusive and max_version is not None,
        )

    def __contains__(self, version: object) -> bool:
        if not isinstance(version, NuGetVersion):
            return False
        if self.min_version is not None:
            if self.min_inclusive:
                if version < self.min_version:
                    return False
            elif version <= self.min_version:
                return False
        if self.max_version is not None:
            if self.max_inclusive:
                if version > self.max_version:
                    return False
            elif version >= self.max_version:
                return False
        return True

    def __str__(self) -> str:
        if self.min_version is None and self.max_version is None:
            return "(,)"
        if self.min_version is not None and self.min_inclusive and self.max_version is None:
            return str(self.min_version)
        if self.min_version is not None and self.min_version == self.max_version:
            return f"[{self.min_version}]"
        low = "[" if self.min_inclusive else "("
        high = "]" if self.max_inclusive else ")"
        return f"{low}{self.min_version or ''}, {self.max_version or ''}{high}"
