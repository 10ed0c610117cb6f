"""Xcode query backend wiring."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from testable_resolver.queries.base import QueryBackend
from testable_resolver.queries.xcode.build_settings import XcodebuildSettingsQuery
from testable_resolver.queries.xcode.config import XcodeBackendConfig
from testable_resolver.queries.xcode.otest_query import OtestQuery


@asynccontextmanager
async def xcode_backend(config: XcodeBackendConfig) -> AsyncGenerator[QueryBackend]:
    """Create the xcodebuild and otest-query pair for a resolution session."""
    yield QueryBackend(
        settings_query=XcodebuildSettingsQuery(config=config),
        test_case_query=OtestQuery(config=config),
    )
