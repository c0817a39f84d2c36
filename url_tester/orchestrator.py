"""Probe orchestrator for fanning requests out across environments."""

import asyncio
import logging
from collections.abc import AsyncGenerator, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import aiohttp

from url_tester.models.config import Environment, TesterConfig
from url_tester.models.result import TestResult
from url_tester.probe import (
    REQUEST_TIMEOUT,
    AppErrorRule,
    extract_state_param,
    probe_url,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class ProbeOrchestrator:
    """Runs every path against each environment, one environment at a time."""

    session: aiohttp.ClientSession = field(repr=False)
    app_error: AppErrorRule | None = None

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: TesterConfig
    ) -> AsyncGenerator["ProbeOrchestrator", None]:
        """Create orchestrator with managed session lifecycle."""
        timeout = aiohttp.ClientTimeout(total=REQUEST_TIMEOUT)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            yield cls(session=session, app_error=config.app_error_rule)

    async def run_environments(
        self,
        environments: Mapping[str, Environment],
        paths: Sequence[str],
    ) -> Sequence[TestResult]:
        """Probe all environments sequentially.

        Each environment's batch is fully awaited before the next starts.

        Args:
            environments: Environments to probe, keyed by name
            paths: Paths appended to each environment's base URL

        Returns:
            One result per (environment, path) pair

        """
        all_results: list[TestResult] = []
        for name, environment in environments.items():
            log.info(
                "--- Testing Environment: %s (Base URL: %s) ---",
                name,
                environment.base_url,
            )
            all_results.extend(await self.run_environment(name, environment, paths))
        return all_results

    async def run_environment(
        self,
        name: str,
        environment: Environment,
        paths: Sequence[str],
    ) -> Sequence[TestResult]:
        """Dispatch every path concurrently and wait for all of them."""
        log.info("Initiating %d request(s) for environment '%s'...", len(paths), name)
        tasks = [
            probe_url(
                self.session,
                environment_name=name,
                base_url=environment.base_url,
                path=path,
                app_error=self.app_error,
            )
            for path in paths
        ]

        results = await asyncio.gather(*tasks, return_exceptions=True)
        log.info("Received %d response(s) from '%s'", len(results), name)

        return self._process_results(name, environment, paths, results)

    def _process_results(
        self,
        name: str,
        environment: Environment,
        paths: Sequence[str],
        results: Sequence[TestResult | BaseException],
    ) -> Sequence[TestResult]:
        """Turn unexpected probe exceptions into failing results."""
        final_results: list[TestResult] = []

        for path, result in zip(paths, results, strict=True):
            if isinstance(result, TestResult):
                final_results.append(result)
            elif isinstance(result, Exception):
                log.error("Probe execution failed: %s", result, exc_info=result)
                final_results.append(
                    TestResult(
                        environment_name=name,
                        url=f"{environment.base_url}{path}",
                        passed=False,
                        error_message=str(result) or type(result).__name__,
                        state_param=extract_state_param(path),
                    )
                )
            else:
                raise result

        return final_results
