"""Configuration for the Xcode query backend."""

from collections.abc import Mapping

from pydantic import BaseModel, Field

DEFAULT_OTEST_QUERY_PATHS: Mapping[str, str] = {
    "macosx": "otest-query-osx",
    "iphonesimulator": "otest-query-ios",
}


class XcodeBackendConfig(BaseModel):
    """Configuration for the Xcode query backend."""

    xcodebuild_path: str = "xcodebuild"
    # Keyed by the PLATFORM_NAME build setting
    otest_query_paths: Mapping[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_OTEST_QUERY_PATHS)
    )
    query_timeout: float = Field(default=300, gt=0)
