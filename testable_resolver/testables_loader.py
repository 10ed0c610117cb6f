"""Loading of testables from a YAML file."""

import asyncio
from collections.abc import Mapping, Sequence
from pathlib import Path

import yaml
from pydantic import Field, ValidationError

from testable_resolver.models.base import Model
from testable_resolver.models.testable import Testable


class TestableEntry(Model):
    """A testable as written in the testables file."""

    __test__ = False

    target: str = Field(..., min_length=1)
    project: str | None = None
    arguments: Sequence[str] = Field(default_factory=list)
    environment: Mapping[str, str] = Field(default_factory=dict)


class TestablesFile(Model):
    """Complete testables file."""

    __test__ = False

    project: str | None = Field(default=None, description="Default project path")
    testables: Sequence[TestableEntry] = Field(default_factory=list)

    def to_testables(self) -> Sequence[Testable]:
        """Resolve each entry against the default project.

        Raises:
            ValueError: If an entry has no project and there is no default

        """
        testables: list[Testable] = []
        for entry in self.testables:
            project = entry.project or self.project
            if project is None:
                raise ValueError(f"No project given for testable '{entry.target}'")
            testables.append(
                Testable(
                    target=entry.target,
                    project_path=project,
                    arguments=entry.arguments,
                    environment=entry.environment,
                )
            )
        return testables


async def load_testables(path: Path) -> Sequence[Testable]:
    """Load testables from a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is empty, not valid YAML or fails validation

    """
    if not path.is_file():
        raise FileNotFoundError(f"Testables file not found: {path}")

    content = await asyncio.to_thread(path.read_text)

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        raise ValueError(f"Empty testables file: {path}")

    try:
        testables_file = TestablesFile.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid testables schema in {path}: {e}") from e

    return testables_file.to_testables()
