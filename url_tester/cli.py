"""CLI entry point for the URL tester."""

import argparse
import asyncio
import logging
import os
import sys
import time
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from url_tester.config_loader import ConfigError, load_config, select_environments
from url_tester.exporter import ExportWriteError, export_csv
from url_tester.orchestrator import ProbeOrchestrator
from url_tester.reporter import ConsoleReporter, build_report


def package_version() -> str:
    """Installed package version, or ``unknown`` from a source checkout."""
    try:
        return version("url-tester")
    except PackageNotFoundError:
        return "unknown"


async def run(
    config_path: Path,
    output_path: Path | None = None,
    env_name: str | None = None,
    color: bool = True,
) -> int:
    """Run URL tests and return exit code.

    Probe failures are reported but do not change the exit code; only
    configuration and export errors do.
    """
    log = logging.getLogger("url_tester")

    log.info("Loading configuration from: %s", config_path)
    try:
        config = load_config(config_path)
    except ConfigError as e:
        log.error("%s", e)
        return 1

    if not config.environments:
        print("No environments found in the configuration file. Exiting.")
        return 0

    if not config.paths:
        print("No paths found in the configuration file. Exiting.")
        return 0

    try:
        environments = select_environments(config, env_name)
    except ConfigError as e:
        log.error("%s", e)
        return 1

    async with ProbeOrchestrator.from_config(config) as orchestrator:
        started = time.perf_counter()
        results = await orchestrator.run_environments(environments, config.paths)
        total_duration = time.perf_counter() - started

    report = build_report(results, total_duration)
    ConsoleReporter(color=color).render(report)

    if output_path is not None:
        log.info("Saving report to CSV: %s", output_path)
        try:
            rows = export_csv(report, output_path)
        except ExportWriteError as e:
            log.error("%s", e)
            return 1
        log.info("CSV report saved successfully (%d row(s)).", rows)

    return 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Test URLs across environments from a configuration file"
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        required=True,
        help="Path to the configuration file (e.g., config.toml)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Optional path to an output CSV file (e.g., report.csv)",
    )
    parser.add_argument(
        "--env",
        default=None,
        help="Run tests only for this environment name from the config",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable ANSI colors in the report",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {package_version()}",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            config_path=args.config,
            output_path=args.output,
            env_name=args.env,
            color=not args.no_color and "NO_COLOR" not in os.environ,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
