"""Package index clients.

The resolver only needs `PackageIndex.find_packages()`; `NuGetV3Index` implements it against the
NuGet V3 protocol (service index + registration resources):

    https://learn.microsoft.com/en-us/nuget/api/overview
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import requests

from .models import DependencySet, DependencySpec, PackageRef
from .versions import InvalidVersionError, NuGetVersion, VersionRange

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "https://api.nuget.org/v3/index.json"

REGISTRATION_TYPES = (
    "RegistrationsBaseUrl/3.6.0",
    "RegistrationsBaseUrl/3.4.0",
    "RegistrationsBaseUrl",
)
PACKAGE_CONTENT_TYPE = "PackageBaseAddress/3.0.0"

# Short framework names as used in package folders (net45, netstandard2.0, ...)
_SHORT_FRAMEWORK_NAMES = {
    "netstandard": ".NETStandard",
    "netcoreapp": ".NETCoreApp",
    "netcore": ".NETCore",
    "netmf": ".NETMicroFramework",
    "portable": ".NETPortable",
    "uap": "UAP",
    "win": "Windows",
    "wp": "WindowsPhone",
    "wpa": "WindowsPhoneApp",
    "sl": "Silverlight",
    "monoandroid": "MonoAndroid",
    "monotouch": "MonoTouch",
    "monomac": "MonoMac",
    "xamarinios": "Xamarin.iOS",
    "xamarinmac": "Xamarin.Mac",
    "tizen": "Tizen",
    "native": "native",
}
_FRAMEWORK_RE = re.compile(r"^(?P<name>\.?[A-Za-z][A-Za-z.]*?)(?=v?\d|[-,]|$)")


class TransportError(RuntimeError):
    """Raised when the package index or a package download can not be reached."""


def framework_identifier(target_framework: str | None) -> str | None:
    """Reduce a target framework moniker to its framework identifier.

    For example:
        ``.NETFramework4.5`` -> ``.NETFramework``
        ``.NETStandard2.0``  -> ``.NETStandard``
        ``net45``            -> ``.NETFramework``
        ``net6.0``           -> ``.NETCoreApp``
        ``netstandard2.0``   -> ``.NETStandard``

    Returns None when no framework is given, meaning "applies to every framework".
    """
    if target_framework is None:
        return None
    target_framework = target_framework.strip()
    if not target_framework:
        return None
    match = _FRAMEWORK_RE.match(target_framework)
    if match is None:
        return target_framework
    name = match.group("name")
    if name.startswith("."):
        return name
    short = name.lower()
    if short == "net":
        version = target_framework[len(name) :]
        major = re.match(r"\d+", version)
        # net5.0 and later are .NET Core under another name; "net45" style is .NET Framework
        if major is not None and "." in version and int(major.group()) >= 5:  # noqa: PLR2004
            return ".NETCoreApp"
        return ".NETFramework"
    return _SHORT_FRAMEWORK_NAMES.get(short, name)


class PackageIndex(ABC):
    """A source of package metadata."""

    @abstractmethod
    def find_packages(self, package_id: str) -> list[PackageRef]:
        """Return every known version of `package_id`, or an empty list if the package does not exist."""
        raise NotImplementedError

    def close(self) -> None:  # noqa: B027
        """Release any resources held by the index."""

    def __enter__(self) -> PackageIndex:
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: object) -> None:
        self.close()


class InMemoryPackageIndex(PackageIndex):
    """An index backed by a fixed collection of packages."""

    def __init__(self, packages: Iterable[PackageRef] = ()) -> None:
        self._packages: dict[str, list[PackageRef]] = {}
        for package in packages:
            self.add(package)

    def add(self, package: PackageRef) -> None:
        self._packages.setdefault(package.id.lower(), []).append(package)

    def find_packages(self, package_id: str) -> list[PackageRef]:
        return list(self._packages.get(package_id.lower(), ()))

    def __len__(self) -> int:
        return sum(map(len, self._packages.values()))


class NuGetV3Index(PackageIndex):
    """Client for a NuGet V3 package source such as nuget.org."""

    def __init__(
        self,
        source: str = DEFAULT_SOURCE,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ) -> None:
        self.source: str = source
        self.timeout: float | None = timeout
        self.session: requests.Session = session if session is not None else requests.Session()
        self.session.headers.setdefault("Accept", "application/json")
        self._resources: dict[str, str] | None = None
        self._candidates: dict[str, list[PackageRef]] = {}

    def close(self) -> None:
        self.session.close()

    def _get_json(self, url: str, *, allow_missing: bool = False) -> Any:
        logger.debug("GET %s", url)
        try:
            response = self.session.get(url, timeout=self.timeout)
            if allow_missing and response.status_code == 404:  # noqa: PLR2004
                return None
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            msg = f"Error querying {url}: {e!s}"
            raise TransportError(msg) from e
        except ValueError as e:
            msg = f"Invalid JSON returned by {url}: {e!s}"
            raise TransportError(msg) from e

    @property
    def resources(self) -> dict[str, str]:
        """Map of resource type to URL from the service index, fetched once."""
        if self._resources is None:
            service_index = self._get_json(self.source)
            resources: dict[str, str] = {}
            for resource in service_index.get("resources", []):
                resource_types = resource.get("@type", [])
                if isinstance(resource_types, str):
                    resource_types = [resource_types]
                for resource_type in resource_types:
                    resources.setdefault(resource_type, resource.get("@id", ""))
            self._resources = resources
        return self._resources

    @property
    def registration_base(self) -> str:
        for resource_type in REGISTRATION_TYPES:
            url = self.resources.get(resource_type)
            if url:
                return url if url.endswith("/") else f"{url}/"
        msg = f"{self.source} does not provide a package registration resource"
        raise TransportError(msg)

    def content_url(self, package_id: str, version: NuGetVersion) -> str:
        """Download URL for a package in the flat container (PackageBaseAddress) resource."""
        base = self.resources.get(PACKAGE_CONTENT_TYPE, "")
        if not base:
            return ""
        if not base.endswith("/"):
            base += "/"
        lower_id = package_id.lower()
        lower_version = version.normalized.lower()
        return f"{base}{lower_id}/{lower_version}/{lower_id}.{lower_version}.nupkg"

    def find_packages(self, package_id: str) -> list[PackageRef]:
        key = package_id.lower()
        if key not in self._candidates:
            self._candidates[key] = self._fetch_packages(package_id)
        return list(self._candidates[key])

    def _fetch_packages(self, package_id: str) -> list[PackageRef]:
        registration_url = f"{self.registration_base}{quote(package_id.lower(), safe='')}/index.json"
        registration = self._get_json(registration_url, allow_missing=True)
        if registration is None:
            logger.debug("%s is not in %s", package_id, self.source)
            return []
        leaves: list[dict[str, Any]] = []
        for page in registration.get("items", []):
            if "items" not in page:
                # large registrations only link to their pages
                page = self._get_json(page["@id"])  # noqa: PLW2901
            leaves.extend(page.get("items", []))

        packages: list[tuple[PackageRef, bool]] = []
        for leaf in leaves:
            package = self._parse_leaf(package_id, leaf)
            if package is not None:
                packages.append((package, bool(leaf["catalogEntry"].get("listed", True))))

        # unlisted versions can still be installed explicitly, but are never the latest release
        latest = max((p.version for p, listed in packages if listed and not p.is_prerelease), default=None)
        return [
            replace(p, is_latest_release=listed and not p.is_prerelease and p.version == latest)
            for p, listed in packages
        ]

    def _parse_leaf(self, package_id: str, leaf: dict[str, Any]) -> PackageRef | None:
        entry = leaf.get("catalogEntry", {})
        if not isinstance(entry, dict):
            logger.warning("Skipping registration leaf %s without an inline catalog entry", leaf.get("@id"))
            return None
        try:
            version = NuGetVersion(entry.get("version", ""))
        except InvalidVersionError as e:
            logger.warning("Skipping %s: %s", package_id, e)
            return None
        pkg_id = entry.get("id") or package_id
        download_url = leaf.get("packageContent") or self.content_url(pkg_id, version)
        return PackageRef(
            id=pkg_id,
            version=version,
            title=entry.get("title") or pkg_id,
            download_url=download_url,
            dependency_sets=tuple(self._parse_dependency_groups(pkg_id, version, entry.get("dependencyGroups", []))),
        )

    @staticmethod
    def _parse_dependency_groups(
        package_id: str, version: NuGetVersion, groups: list[dict[str, Any]]
    ) -> Iterable[DependencySet]:
        for group in groups or ():
            dependencies: list[DependencySpec] = []
            for dependency in group.get("dependencies", []) or ():
                if not dependency.get("id"):
                    continue
                try:
                    version_range = VersionRange.parse(dependency.get("range"))
                except InvalidVersionError as e:
                    logger.warning(
                        "Ignoring dependency %s of %s %s: %s", dependency.get("id"), package_id, version, e
                    )
                    continue
                dependencies.append(DependencySpec(package_id=dependency["id"], version_range=version_range))
            yield DependencySet(
                target_framework=framework_identifier(group.get("targetFramework")),
                dependencies=tuple(dependencies),
            )
