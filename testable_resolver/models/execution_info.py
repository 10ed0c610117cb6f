"""Resolution record for a single testable."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from testable_resolver.models.outcome import Failure, Outcome, Success
from testable_resolver.models.testable import Testable

type BuildSettings = Mapping[str, str]
type TestCaseList = Sequence[str]


@dataclass(frozen=True, kw_only=True)
class TestableExecutionInfo:
    """Everything needed to run a test bundle.

    Carries the fetched build settings, the test cases discovered in the
    bundle (each of the form ``Class/method``), and the arguments and
    environment for the test process with all build setting macros expanded.
    Both query outcomes are kept verbatim, so a settings failure and a test
    case failure are independently observable.
    """

    __test__ = False

    testable: Testable
    build_settings_outcome: Outcome[BuildSettings]
    test_cases_outcome: Outcome[TestCaseList]
    expanded_arguments: Sequence[str]
    expanded_environment: Mapping[str, str]

    @property
    def build_settings(self) -> BuildSettings | None:
        """Fetched build settings, or None when the settings query failed."""
        if isinstance(self.build_settings_outcome, Success):
            return self.build_settings_outcome.value
        return None

    @property
    def build_settings_error(self) -> str | None:
        """Why the settings query failed, or None."""
        if isinstance(self.build_settings_outcome, Failure):
            return self.build_settings_outcome.message
        return None

    @property
    def test_cases(self) -> TestCaseList | None:
        """Test cases found in the bundle, or None when the query failed."""
        if isinstance(self.test_cases_outcome, Success):
            return self.test_cases_outcome.value
        return None

    @property
    def test_cases_query_error(self) -> str | None:
        """Why the test case query failed, or None."""
        if isinstance(self.test_cases_outcome, Failure):
            return self.test_cases_outcome.message
        return None

    @property
    def has_failures(self) -> bool:
        """Whether either query failed for this testable."""
        return not (self.build_settings_outcome.ok and self.test_cases_outcome.ok)
