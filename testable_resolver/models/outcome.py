"""Tagged outcome of an external query: a value or an error message, never both."""

from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class Success[T]:
    """Query completed and produced a value."""

    value: T

    @property
    def ok(self) -> bool:
        """Always True for a success."""
        return True


@dataclass(frozen=True, kw_only=True)
class Failure:
    """Query failed or was skipped; carries a human-readable message."""

    message: str

    @property
    def ok(self) -> bool:
        """Always False for a failure."""
        return False


type Outcome[T] = Success[T] | Failure
