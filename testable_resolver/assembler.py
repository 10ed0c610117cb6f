"""Assembly of resolution records for a set of testables."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from types import MappingProxyType

from testable_resolver.macros import expand_arguments, expand_environment
from testable_resolver.models.execution_info import TestableExecutionInfo
from testable_resolver.models.outcome import Failure
from testable_resolver.models.testable import Testable
from testable_resolver.queries.base import QueryBackend
from testable_resolver.settings_store import SettingsStore
from testable_resolver.test_case_lister import TestCaseLister

log = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 4


@dataclass(frozen=True, kw_only=True)
class ResolutionAssembler:
    """Resolves testables into execution records, one independent task each."""

    settings_store: SettingsStore
    test_case_lister: TestCaseLister
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    resolution_timeout: float | None = None

    def __post_init__(self) -> None:
        """Validate the concurrency bound."""
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

    @classmethod
    def from_backend(
        cls,
        backend: QueryBackend,
        *,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        resolution_timeout: float | None = None,
    ) -> "ResolutionAssembler":
        """Create an assembler with fresh session caches over a backend."""
        return cls(
            settings_store=SettingsStore(query=backend.settings_query),
            test_case_lister=TestCaseLister(query=backend.test_case_query),
            max_concurrency=max_concurrency,
            resolution_timeout=resolution_timeout,
        )

    async def resolve(
        self,
        testables: Sequence[Testable],
        build_arguments: Sequence[str],
        sdk: str,
    ) -> Sequence[TestableExecutionInfo]:
        """Resolve every testable, preserving input order.

        Args:
            testables: Testables to resolve
            build_arguments: Extra build tool arguments shared by all testables
            sdk: SDK name passed to the build settings query

        Returns:
            One record per testable. A testable whose resolution raised or was
            cancelled still gets a record carrying the failure.

        """
        if not testables:
            log.info("No testables to resolve")
            return []
        if not sdk:
            raise ValueError("sdk must be a non-empty SDK name")

        log.info(
            "Resolving %d testable(s) (sdk=%s, max_concurrency=%d)...",
            len(testables),
            sdk,
            self.max_concurrency,
        )
        semaphore = asyncio.Semaphore(self.max_concurrency)
        tasks = [
            self._resolve_bounded(semaphore, testable, build_arguments, sdk)
            for testable in testables
        ]

        results = await asyncio.gather(*tasks, return_exceptions=True)
        log.info("Resolution completed")

        return self._process_results(testables, results)

    async def resolve_testable(
        self,
        testable: Testable,
        build_arguments: Sequence[str],
        sdk: str,
    ) -> TestableExecutionInfo:
        """Resolve a single testable.

        Raises:
            TimeoutError: If resolution_timeout is set and exceeded

        """
        async with asyncio.timeout(self.resolution_timeout):
            settings = await self.settings_store.fetch(testable, build_arguments, sdk)
            test_cases = await self.test_case_lister.list_test_cases(
                testable, settings
            )

        build_settings = settings.value if not isinstance(settings, Failure) else None
        return TestableExecutionInfo(
            testable=testable,
            build_settings_outcome=settings,
            test_cases_outcome=test_cases,
            expanded_arguments=tuple(
                expand_arguments(testable.arguments, build_settings)
            ),
            expanded_environment=MappingProxyType(
                dict(expand_environment(testable.environment, build_settings))
            ),
        )

    async def _resolve_bounded(
        self,
        semaphore: asyncio.Semaphore,
        testable: Testable,
        build_arguments: Sequence[str],
        sdk: str,
    ) -> TestableExecutionInfo:
        async with semaphore:
            return await self.resolve_testable(testable, build_arguments, sdk)

    def _process_results(
        self,
        testables: Sequence[Testable],
        results: Sequence[TestableExecutionInfo | BaseException],
    ) -> Sequence[TestableExecutionInfo]:
        """Process results from resolution, turning exceptions into records."""
        final_results: list[TestableExecutionInfo] = []

        for testable, result in zip(testables, results, strict=True):
            if isinstance(result, TestableExecutionInfo):
                log.info(
                    "Testable resolved: target=%s failures=%s",
                    testable.target,
                    result.has_failures,
                )
                final_results.append(result)
            elif (
                isinstance(result, TimeoutError)
                and self.resolution_timeout is not None
            ):
                log.error(
                    "Resolution of %s timed out after %s seconds",
                    testable.target,
                    self.resolution_timeout,
                )
                final_results.append(
                    failed_execution_info(
                        testable,
                        f"Resolution timed out after {self.resolution_timeout} seconds",
                    )
                )
            elif isinstance(result, asyncio.CancelledError):
                log.error("Resolution of %s was cancelled", testable.target)
                final_results.append(
                    failed_execution_info(testable, "Resolution was cancelled")
                )
            else:
                log.error(
                    "Resolution of %s failed: %s",
                    testable.target,
                    result,
                    exc_info=result,
                )
                final_results.append(failed_execution_info(testable, str(result)))

        return final_results


def failed_execution_info(testable: Testable, message: str) -> TestableExecutionInfo:
    """Record for a testable whose resolution did not complete.

    Arguments and environment pass through unexpanded.
    """
    return TestableExecutionInfo(
        testable=testable,
        build_settings_outcome=Failure(message=message),
        test_cases_outcome=Failure(
            message=f"Test case query skipped, resolution failed: {message}"
        ),
        expanded_arguments=tuple(testable.arguments),
        expanded_environment=MappingProxyType(dict(testable.environment)),
    )
