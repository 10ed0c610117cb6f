"""Fetching and caching of build settings per testable."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from testable_resolver.cache import KeyedOnceCache
from testable_resolver.errors import SettingsFetchError
from testable_resolver.models.execution_info import BuildSettings
from testable_resolver.models.outcome import Failure, Outcome, Success
from testable_resolver.models.testable import Testable
from testable_resolver.queries.base import BuildSettingsQuery

log = logging.getLogger(__name__)

type SettingsKey = tuple[str, tuple[str, ...], str]


@dataclass(frozen=True, kw_only=True)
class SettingsStore:
    """Build settings for testables, queried at most once per key.

    The key is the testable identity together with the build arguments and
    the SDK. Failed queries are cached like successful ones, so a target
    whose settings cannot be dumped is not queried again in the session.
    """

    query: BuildSettingsQuery
    _cache: KeyedOnceCache[SettingsKey, Outcome[BuildSettings]] = field(
        default_factory=lambda: KeyedOnceCache(name="build settings"),
        init=False,
        repr=False,
    )

    async def fetch(
        self,
        testable: Testable,
        build_arguments: Sequence[str],
        sdk: str,
    ) -> Outcome[BuildSettings]:
        """Return the build settings of a testable, or why they are missing."""
        if not sdk:
            raise ValueError("sdk must be a non-empty SDK name")

        key: SettingsKey = (testable.identity, tuple(build_arguments), sdk)
        return await self._cache.get_or_load(
            key, lambda: self._query(testable, build_arguments, sdk)
        )

    async def _query(
        self,
        testable: Testable,
        build_arguments: Sequence[str],
        sdk: str,
    ) -> Outcome[BuildSettings]:
        try:
            settings_by_target = await self.query.fetch_build_settings(
                testable.project_path, testable.target, build_arguments, sdk
            )
        except SettingsFetchError as e:
            log.warning("Build settings query failed for %s: %s", testable.target, e)
            return Failure(message=str(e))

        settings = settings_by_target.get(testable.target)
        if settings is None:
            message = (
                f"No build settings for target '{testable.target}' "
                f"(found: {', '.join(settings_by_target)})"
            )
            log.warning(
                "Build settings query failed for %s: %s", testable.target, message
            )
            return Failure(message=message)

        log.info("Fetched %d build settings for %s", len(settings), testable.target)
        return Success(value=MappingProxyType(dict(settings)))
