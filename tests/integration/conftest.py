"""Fixtures for integration tests running fake query executables."""

import stat
import textwrap
from pathlib import Path
from typing import Protocol

import pytest


class MakeExecutableFn(Protocol):
    """Protocol for executable creation function."""

    def __call__(self, name: str, script: str) -> Path:
        """Write a shell script and return its path."""


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    """Directory holding the fake executables."""
    path = tmp_path / "bin"
    path.mkdir()
    return path


@pytest.fixture
def make_executable(bin_dir: Path) -> MakeExecutableFn:
    """Return a function to create executable shell scripts."""

    def _make(name: str, script: str) -> Path:
        path = bin_dir / name
        path.write_text("#!/bin/sh\n" + textwrap.dedent(script))
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make


@pytest.fixture
def products_dir(tmp_path: Path) -> Path:
    """Build products directory with AppTests and KitTests bundles."""
    path = tmp_path / "Build" / "Products" / "Debug"
    (path / "AppTests.xctest").mkdir(parents=True)
    (path / "KitTests.xctest").mkdir(parents=True)
    return path


@pytest.fixture
def xcodebuild(
    make_executable: MakeExecutableFn, products_dir: Path, tmp_path: Path
) -> Path:
    """Fake xcodebuild that dumps settings and fails for BrokenTests."""
    script = """\
        echo "$@" >> "@LOG@"
        case "$*" in
          *BrokenTests*)
            echo "xcodebuild: error: The target BrokenTests does not exist." >&2
            exit 65
            ;;
        esac
        target=""
        while [ $# -gt 0 ]; do
          if [ "$1" = "-target" ]; then target="$2"; fi
          shift
        done
        echo "User defaults from command line:"
        echo "    IDEPackageSupportUseBuiltinSCM = YES"
        echo ""
        echo "Build settings for action build and target $target:"
        echo "    BUILT_PRODUCTS_DIR = @PRODUCTS@"
        echo "    CONFIGURATION = Debug"
        echo "    FULL_PRODUCT_NAME = $target.xctest"
        echo "    PLATFORM_NAME = macosx"
        echo "    TEST_HOST = \\$(BUILT_PRODUCTS_DIR)/App.app/App"
        echo ""
        """
    return make_executable(
        "xcodebuild",
        script.replace("@LOG@", str(tmp_path / "xcodebuild.log")).replace(
            "@PRODUCTS@", str(products_dir)
        ),
    )


@pytest.fixture
def otest_query(make_executable: MakeExecutableFn, tmp_path: Path) -> Path:
    """Fake otest-query listing tests; KitTests has none."""
    script = """\
        echo "$1 $DYLD_FRAMEWORK_PATH" >> "@LOG@"
        case "$1" in
          *KitTests.xctest) echo "[]" ;;
          *) echo '["AppTests/testLaunch", "AppTests/testLogin"]' ;;
        esac
        """
    return make_executable(
        "otest-query-osx",
        script.replace("@LOG@", str(tmp_path / "otest-query.log")),
    )
