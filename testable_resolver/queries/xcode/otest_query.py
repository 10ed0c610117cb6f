"""Test case query backed by the otest-query helper executables."""

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from testable_resolver.errors import TestCaseFetchError
from testable_resolver.queries.base import TestBundle, TestCaseQuery
from testable_resolver.queries.process import run_process
from testable_resolver.queries.xcode.config import XcodeBackendConfig

log = logging.getLogger(__name__)


def parse_test_cases(output: str) -> Sequence[str]:
    """Parse otest-query output, a JSON array or one test case per line.

    Raises:
        TestCaseFetchError: If the output is not a list of "Class/method" strings

    """
    text = output.strip()
    if not text:
        return []

    if text.startswith("["):
        try:
            entries = json.loads(text)
        except json.JSONDecodeError as e:
            raise TestCaseFetchError(f"Malformed otest-query output: {e}") from e
        if not all(isinstance(entry, str) for entry in entries):
            raise TestCaseFetchError("Malformed otest-query output: expected strings")
    else:
        entries = [line.strip() for line in text.splitlines() if line.strip()]

    for entry in entries:
        class_name, _, method = entry.partition("/")
        if not class_name or not method or "/" in method:
            raise TestCaseFetchError(f"Malformed test case identifier: {entry!r}")
    return entries


@dataclass(frozen=True, kw_only=True)
class OtestQuery(TestCaseQuery):
    """Lists test cases by loading the bundle into otest-query."""

    config: XcodeBackendConfig

    async def list_test_cases(self, bundle: TestBundle) -> Sequence[str]:
        """Run the otest-query executable matching the bundle's platform."""
        executable = self.config.otest_query_paths.get(bundle.platform_name)
        if executable is None:
            raise TestCaseFetchError(
                f"No otest-query executable for platform '{bundle.platform_name}'"
            )

        log.info("Querying test cases: bundle=%s", bundle.path)
        try:
            result = await run_process(
                [executable, bundle.path],
                timeout=self.config.query_timeout,
                env=bundle.environment,
            )
        except OSError as e:
            raise TestCaseFetchError(f"Failed to run {executable}: {e}") from e
        except TimeoutError as e:
            raise TestCaseFetchError(
                f"otest-query did not complete within "
                f"{self.config.query_timeout} seconds"
            ) from e

        if result.returncode != 0:
            raise TestCaseFetchError(
                f"otest-query failed with exit code {result.returncode}: "
                f"{result.stderr.strip()}"
            )

        return parse_test_cases(result.stdout)
