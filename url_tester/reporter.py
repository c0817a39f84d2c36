"""Console rendering of probe results."""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import TextIO

from url_tester.models.result import TestResult, result_sort_key

COLOR_GREEN = "\x1b[32m"
COLOR_RED = "\x1b[31m"
COLOR_RESET = "\x1b[0m"

ENV_WIDTH = 10
STATE_WIDTH = 20
STATE_LIMIT = 18
STATUS_WIDTH = 10
PASSED_WIDTH = 7
DURATION_WIDTH = 10
ERROR_WIDTH = 60
ERROR_LIMIT = 58
RULE_WIDTH = 128


@dataclass(frozen=True, kw_only=True)
class Report:
    """Results split into sorted passing and failing partitions."""

    passing: Sequence[TestResult]
    failing: Sequence[TestResult]
    total_duration: float

    @property
    def ordered(self) -> Iterator[TestResult]:
        """Passing results first, then failing ones."""
        yield from self.passing
        yield from self.failing


def build_report(results: Sequence[TestResult], total_duration: float) -> Report:
    """Partition results by outcome and sort each partition."""
    return Report(
        passing=sorted((r for r in results if r.passed), key=result_sort_key),
        failing=sorted((r for r in results if not r.passed), key=result_sort_key),
        total_duration=total_duration,
    )


def truncate(text: str, max_len: int) -> str:
    """Shorten ``text`` to ``max_len`` characters, ending in ``...`` if room."""
    if len(text) <= max_len:
        return text
    if max_len > 3:
        return f"{text[: max_len - 3]}..."
    return text[:max_len]


@dataclass(frozen=True, kw_only=True)
class ConsoleReporter:
    """Prints pass/fail tables.

    ``stream`` defaults to whatever ``sys.stdout`` is at print time.
    """

    color: bool = True
    stream: TextIO | None = None

    def render(self, report: Report) -> None:
        self._print(f"\nTotal Test Duration: {report.total_duration:.2f}s")
        self._render_section("Passing", report.passing)
        self._render_section("Failing", report.failing)

    def format_row(self, result: TestResult) -> str:
        status = str(result.status_code) if result.status_code is not None else "N/A"
        state = result.state_param if result.state_param is not None else "N/A"
        error = result.error_message if result.error_message is not None else "None"
        duration = f"{result.duration_secs:.2f}s"
        return (
            f"{truncate(result.environment_name, ENV_WIDTH):<{ENV_WIDTH}} | "
            f"{truncate(state, STATE_LIMIT):<{STATE_WIDTH}} | "
            f"{status:<{STATUS_WIDTH}} | "
            f"{self._format_passed(result.passed)} | "
            f"{duration:<{DURATION_WIDTH}} | "
            f"{truncate(error, ERROR_LIMIT):<{ERROR_WIDTH}}"
        )

    def _format_passed(self, passed: bool) -> str:
        # Pad the visible text before coloring so escapes don't skew alignment.
        label = f"{'PASS' if passed else 'FAIL':<{PASSED_WIDTH}}"
        if not self.color:
            return label
        color = COLOR_GREEN if passed else COLOR_RED
        return f"{color}{label.rstrip()}{COLOR_RESET}{label[4:]}"

    def _render_section(self, title: str, results: Sequence[TestResult]) -> None:
        if not results:
            self._print(f"\n--- No {title} Tests Detected ---")
            return

        self._print(f"\n--- {title} Tests Report ({len(results)}) ---")
        self._print(self._header())
        self._print("-" * RULE_WIDTH)
        for result in results:
            self._print(self.format_row(result))
        self._print(f"\n--- {title} Tests Report End ---")

    def _header(self) -> str:
        return (
            f"{'Env':<{ENV_WIDTH}} | {'State':<{STATE_WIDTH}} | "
            f"{'Status':<{STATUS_WIDTH}} | {'Passed':<{PASSED_WIDTH}} | "
            f"{'Duration':<{DURATION_WIDTH}} | {'Error Message':<{ERROR_WIDTH}}"
        )

    def _print(self, line: str) -> None:
        print(line, file=self.stream)
