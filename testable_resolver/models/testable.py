"""Models describing a test target to resolve."""

from collections.abc import Mapping, Sequence

from pydantic import Field

from testable_resolver.models.base import Model


class Testable(Model):
    """A buildable target holding test cases, with its raw run configuration."""

    __test__ = False

    target: str = Field(..., min_length=1, description="Target name in the project")
    project_path: str = Field(..., min_length=1, description="Path to .xcodeproj")
    arguments: Sequence[str] = Field(
        default_factory=tuple,
        description="Arguments for the test process, macros unexpanded",
    )
    environment: Mapping[str, str] = Field(
        default_factory=dict,
        description="Environment for the test process, macros unexpanded",
    )

    @property
    def identity(self) -> str:
        """Stable identity used as a cache key component."""
        return f"{self.project_path}::{self.target}"
