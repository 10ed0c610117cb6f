"""Abstract interfaces for the external queries a resolution depends on."""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field


@dataclass(frozen=True, kw_only=True)
class TestBundle:
    """A compiled test bundle located through its build settings."""

    __test__ = False

    path: str
    platform_name: str
    environment: Mapping[str, str] = field(default_factory=dict)


class BuildSettingsQuery(ABC):
    """Dumps the build settings of a target."""

    @abstractmethod
    async def fetch_build_settings(
        self,
        project_path: str,
        target: str,
        build_arguments: Sequence[str],
        sdk: str,
    ) -> Mapping[str, Mapping[str, str]]:
        """Query the build tool for build settings.

        Args:
            project_path: Path to the project containing the target
            target: Target name
            build_arguments: Extra build tool arguments (configuration etc.)
            sdk: SDK name, e.g. "iphonesimulator"

        Returns:
            Build settings in output order, keyed by the target they belong to

        Raises:
            SettingsFetchError: If the query fails or its output is malformed

        """


class TestCaseQuery(ABC):
    """Lists the test cases contained in a compiled bundle."""

    __test__ = False

    @abstractmethod
    async def list_test_cases(self, bundle: TestBundle) -> Sequence[str]:
        """Query the bundle for its test cases.

        Returns:
            Test case identifiers of the form "Class/method", in output order

        Raises:
            TestCaseFetchError: If the query fails or its output is malformed

        """


@dataclass(frozen=True, kw_only=True)
class QueryBackend:
    """The pair of external queries used for one resolution session."""

    settings_query: BuildSettingsQuery
    test_case_query: TestCaseQuery
