"""Shared pytest configuration.

Tests that talk to a real NuGet feed are marked `integration` and only run with `--runintegration`.
"""

import pytest

from nuget_downloader.index import DEFAULT_SOURCE


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--runintegration",
        action="store_true",
        default=False,
        help="run integration tests against a live NuGet feed",
    )
    parser.addoption(
        "--nuget-source",
        default=DEFAULT_SOURCE,
        help="NuGet V3 service index used by integration tests",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "integration: test needs network access to a NuGet feed")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--runintegration"):
        return
    skip_integration = pytest.mark.skip(reason="need --runintegration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture
def nuget_source(request: pytest.FixtureRequest) -> str:
    return request.config.getoption("--nuget-source")
