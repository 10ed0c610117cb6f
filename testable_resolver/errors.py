"""Errors raised while resolving testables."""


class ResolutionError(Exception):
    """Base class for failures of an external resolution query."""


class SettingsFetchError(ResolutionError):
    """Raised when the build settings query fails or its output is unparsable."""


class TestCaseFetchError(ResolutionError):
    """Raised when the test case query fails or its output is unparsable."""

    __test__ = False
