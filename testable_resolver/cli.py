"""CLI entry point for resolving testables."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from testable_resolver.assembler import DEFAULT_MAX_CONCURRENCY, ResolutionAssembler
from testable_resolver.models.execution_info import TestableExecutionInfo
from testable_resolver.queries.xcode import XcodeBackendConfig, xcode_backend
from testable_resolver.testables_loader import load_testables

STATUS_SYMBOLS = {
    "resolved": "✓",
    "failed": "✗",
}


def log_results_summary(
    log: logging.Logger, infos: Sequence[TestableExecutionInfo]
) -> None:
    """Log a formatted summary of resolution results."""
    log.info("=" * 80)
    log.info("Resolution Summary:")
    log.info("=" * 80)

    for info in infos:
        status = "failed" if info.has_failures else "resolved"
        test_cases = info.test_cases
        log.info(
            "%s %s: %s (%s test case(s))",
            STATUS_SYMBOLS[status],
            info.testable.target,
            status,
            len(test_cases) if test_cases is not None else "?",
        )
        if info.build_settings_error:
            log.info("  Build settings error: %s", info.build_settings_error)
        if info.test_cases_query_error:
            log.info("  Test cases error: %s", info.test_cases_query_error)


def format_output(infos: Sequence[TestableExecutionInfo]) -> dict[str, Any]:
    """Format resolution records for JSON output."""
    results: list[dict[str, Any]] = [
        {
            "target": info.testable.target,
            "project": info.testable.project_path,
            "build_settings_error": info.build_settings_error,
            "test_cases_error": info.test_cases_query_error,
            "test_cases": (
                list(info.test_cases) if info.test_cases is not None else None
            ),
            "arguments": list(info.expanded_arguments),
            "environment": dict(info.expanded_environment),
        }
        for info in infos
    ]

    failed = sum(1 for info in infos if info.has_failures)
    return {
        "total": len(results),
        "resolved": len(results) - failed,
        "failed": failed,
        "results": results,
    }


async def run(
    testables_path: Path,
    sdk: str,
    build_arguments: Sequence[str] = (),
    backend_config_json: str = "{}",
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    resolution_timeout: float | None = None,
) -> int:
    """Resolve testables and return exit code.

    Raises:
        pydantic.ValidationError: If the backend configuration is invalid

    """
    log = logging.getLogger("testable_resolver")

    config = XcodeBackendConfig.model_validate_json(backend_config_json)
    log.info("Using xcodebuild at %s", config.xcodebuild_path)

    log.info("Loading testables from %s", testables_path)
    testables = await load_testables(testables_path)

    if not testables:
        log.info("No testables to resolve")
        print(json.dumps(format_output([])))
        return 0

    async with xcode_backend(config) as backend:
        assembler = ResolutionAssembler.from_backend(
            backend,
            max_concurrency=max_concurrency,
            resolution_timeout=resolution_timeout,
        )
        infos = await assembler.resolve(testables, build_arguments, sdk)

    log_results_summary(log, infos)

    output = format_output(infos)
    print(json.dumps(output, indent=2))

    return 1 if any(info.has_failures for info in infos) else 0


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Resolve build settings, test cases and run configuration "
        "of test targets",
        epilog="Arguments after -- are passed to the build settings query.",
    )
    parser.add_argument(
        "--testables",
        type=Path,
        required=True,
        help="Path to the YAML file listing testables",
    )
    parser.add_argument(
        "--sdk",
        required=True,
        help="SDK to resolve build settings for (e.g., iphonesimulator)",
    )
    parser.add_argument(
        "--backend-config",
        default="{}",
        help="JSON configuration for the Xcode backend",
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=DEFAULT_MAX_CONCURRENCY,
        help="Maximum number of testables resolved at once",
    )
    parser.add_argument(
        "--resolution-timeout",
        type=float,
        default=None,
        help="Seconds allowed for resolving a single testable",
    )
    parser.add_argument(
        "build_arguments",
        nargs=argparse.REMAINDER,
        help="Build arguments, after --",
    )

    args = parser.parse_args(argv)
    build_arguments = list(args.build_arguments)
    if build_arguments[:1] == ["--"]:
        build_arguments = build_arguments[1:]

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            testables_path=args.testables,
            sdk=args.sdk,
            build_arguments=build_arguments,
            backend_config_json=args.backend_config,
            max_concurrency=args.max_concurrency,
            resolution_timeout=args.resolution_timeout,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
