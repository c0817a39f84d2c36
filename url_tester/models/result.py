"""Models for probe results."""

from dataclasses import dataclass

from pydantic import BaseModel


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Outcome of a single GET against one environment and path."""

    __test__ = False

    environment_name: str
    url: str
    status_code: int | None = None
    response_body_preview: str = ""
    passed: bool = False
    error_message: str | None = None
    duration_secs: float = 0.0
    state_param: str | None = None


def result_sort_key(result: TestResult) -> tuple[str, bool, str]:
    """Order by environment, then state, with a missing state first."""
    return (
        result.environment_name,
        result.state_param is not None,
        result.state_param or "",
    )


class ApiErrorBody(BaseModel):
    """The part of an application error response we report."""

    message: str
