"""Single-request probing and pass/fail classification."""

import logging
import time
from dataclasses import dataclass
from http import HTTPStatus

import aiohttp
from pydantic import ValidationError
from yarl import URL

from url_tester.models.result import ApiErrorBody, TestResult

log = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10
PREVIEW_LENGTH = 100
STATE_MARKER = "State="


@dataclass(frozen=True, kw_only=True)
class AppErrorRule:
    """Detects application errors reported inside 2xx responses."""

    key: str
    code: str

    @property
    def marker(self) -> str:
        """The literal ``"key":"code"`` pair searched for in the body."""
        return f'"{self.key}":"{self.code}"'

    def matches(self, body: str) -> bool:
        return self.marker in body

    def describe(self, body: str) -> str:
        """Build the error message, pulling ``message`` from a JSON body."""
        prefix = f"App Error ({self.key}: {self.code})"
        try:
            api_error = ApiErrorBody.model_validate_json(body)
        except ValidationError:
            return f"{prefix}: message parsing failed."
        return f"{prefix}: {api_error.message}"


def extract_state_param(path: str) -> str | None:
    """Return the value following ``State=`` up to the next ``&``.

    This is a plain substring search, not a query string parser.
    """
    _, found, rest = path.partition(STATE_MARKER)
    if not found:
        return None
    state, _, _ = rest.partition("&")
    return state


def format_status(status: int) -> str:
    """Render a status code with its reason phrase when one is known."""
    try:
        return f"{status} {HTTPStatus(status).phrase}"
    except ValueError:
        return str(status)


def classify_response(
    status: int,
    body: str,
    app_error: AppErrorRule | None,
    read_error: str | None = None,
) -> tuple[bool, str | None]:
    """Decide whether a received response passes.

    Returns:
        Tuple of (passed, error message)

    """
    if not 200 <= status < 300:
        return False, f"HTTP Status Error: {format_status(status)}"
    if app_error is not None and app_error.matches(body):
        return False, app_error.describe(body)
    if read_error is not None:
        return False, read_error
    return True, None


def describe_transport_error(exc: Exception) -> str:
    """Text recorded for a request that produced no response."""
    if isinstance(exc, TimeoutError):
        return f"Request timed out after {REQUEST_TIMEOUT}s"
    return str(exc) or type(exc).__name__


async def read_body(response: aiohttp.ClientResponse) -> tuple[str, str | None]:
    """Read the body as text, replacing undecodable bytes.

    On a transport failure mid-body, return an empty body and the error.
    """
    try:
        return await response.text(errors="replace"), None
    except (aiohttp.ClientError, TimeoutError) as exc:
        return "", f"Failed to read response body: {exc}"


async def probe_url(
    session: aiohttp.ClientSession,
    *,
    environment_name: str,
    base_url: str,
    path: str,
    app_error: AppErrorRule | None = None,
) -> TestResult:
    """GET ``base_url + path`` once and classify the outcome.

    Transport and body errors are recorded on the result, never raised.
    """
    started = time.perf_counter()
    state_param = extract_state_param(path)
    url = f"{base_url}{path}"

    status_code: int | None = None
    body = ""
    passed = False
    error_message: str | None = None

    try:
        async with session.get(URL(url, encoded=True)) as response:
            status_code = response.status
            body, read_error = await read_body(response)
    except (aiohttp.ClientError, TimeoutError, ValueError) as exc:
        error_message = describe_transport_error(exc)
    else:
        passed, error_message = classify_response(
            status_code, body, app_error, read_error
        )

    result = TestResult(
        environment_name=environment_name,
        url=url,
        status_code=status_code,
        response_body_preview=body[:PREVIEW_LENGTH],
        passed=passed,
        error_message=error_message,
        duration_secs=time.perf_counter() - started,
        state_param=state_param,
    )
    log.debug(
        "Probe completed: env=%s url=%s status=%s passed=%s duration=%.2fs",
        environment_name,
        url,
        status_code,
        passed,
        result.duration_secs,
    )
    return result
