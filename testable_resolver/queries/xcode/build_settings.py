"""Build settings query backed by ``xcodebuild -showBuildSettings``."""

import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from testable_resolver.errors import SettingsFetchError
from testable_resolver.queries.base import BuildSettingsQuery
from testable_resolver.queries.process import run_process
from testable_resolver.queries.xcode.config import XcodeBackendConfig

log = logging.getLogger(__name__)

HEADER_PATTERN = re.compile(
    r'^Build settings for action (?P<action>\S+) and target "?(?P<target>.+?)"?:\s*$'
)
SETTING_PATTERN = re.compile(r"^\s+(?P<name>[A-Za-z_][A-Za-z0-9_]*) = ?(?P<value>.*)$")


def parse_build_settings(output: str) -> Mapping[str, Mapping[str, str]]:
    """Parse ``-showBuildSettings`` output into settings per target.

    Only indented ``NAME = value`` lines following a "Build settings for
    action ... and target ..." header are collected; anything else, such as
    the "User defaults from command line:" section, is skipped.

    Raises:
        SettingsFetchError: If the output contains no build settings block

    """
    settings_by_target: dict[str, dict[str, str]] = {}
    current: dict[str, str] | None = None

    for line in output.splitlines():
        if header := HEADER_PATTERN.match(line):
            current = settings_by_target.setdefault(header["target"], {})
            continue
        if not line.strip() or not line[0].isspace():
            current = None
            continue
        if current is not None and (setting := SETTING_PATTERN.match(line)):
            current[setting["name"]] = setting["value"]

    if not settings_by_target:
        raise SettingsFetchError("No build settings found in xcodebuild output")
    return settings_by_target


@dataclass(frozen=True, kw_only=True)
class XcodebuildSettingsQuery(BuildSettingsQuery):
    """Runs xcodebuild to dump the build settings of a target."""

    config: XcodeBackendConfig

    def command(
        self,
        project_path: str,
        target: str,
        build_arguments: Sequence[str],
        sdk: str,
    ) -> Sequence[str]:
        """Argument vector for the xcodebuild settings query."""
        return [
            self.config.xcodebuild_path,
            "-showBuildSettings",
            "-project",
            project_path,
            "-target",
            target,
            "-sdk",
            sdk,
            *build_arguments,
        ]

    async def fetch_build_settings(
        self,
        project_path: str,
        target: str,
        build_arguments: Sequence[str],
        sdk: str,
    ) -> Mapping[str, Mapping[str, str]]:
        """Run xcodebuild and parse its settings dump."""
        argv = self.command(project_path, target, build_arguments, sdk)
        log.info("Fetching build settings: target=%s sdk=%s", target, sdk)

        try:
            result = await run_process(argv, timeout=self.config.query_timeout)
        except OSError as e:
            raise SettingsFetchError(f"Failed to run {argv[0]}: {e}") from e
        except TimeoutError as e:
            raise SettingsFetchError(
                f"xcodebuild -showBuildSettings did not complete within "
                f"{self.config.query_timeout} seconds"
            ) from e

        if result.returncode != 0:
            raise SettingsFetchError(
                f"xcodebuild -showBuildSettings failed with exit code "
                f"{result.returncode}: {result.stderr.strip()}"
            )

        return parse_build_settings(result.stdout)
