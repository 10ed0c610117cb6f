"""Xcode query backend module."""

from testable_resolver.queries.xcode.backend import xcode_backend
from testable_resolver.queries.xcode.build_settings import XcodebuildSettingsQuery
from testable_resolver.queries.xcode.config import XcodeBackendConfig
from testable_resolver.queries.xcode.otest_query import OtestQuery

__all__ = [
    "OtestQuery",
    "XcodeBackendConfig",
    "XcodebuildSettingsQuery",
    "xcode_backend",
]
