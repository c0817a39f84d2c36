"""Integration tests for probing over a real aiohttp session."""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, patch

import aiohttp
import pytest
from aioresponses import aioresponses as aioresponses_cls

from url_tester.probe import REQUEST_TIMEOUT, AppErrorRule, probe_url

BASE_URL = "http://dev.test"


@pytest.fixture
async def session(
    aioresponses: aioresponses_cls,
) -> AsyncGenerator[aiohttp.ClientSession, None]:
    """Create a session with the production timeout."""
    timeout = aiohttp.ClientTimeout(total=REQUEST_TIMEOUT)
    async with aiohttp.ClientSession(timeout=timeout) as client:
        yield client


class TestProbeUrl:
    """Tests for probe_url."""

    async def test_passes_on_200(
        self, session: aiohttp.ClientSession, aioresponses: aioresponses_cls
    ) -> None:
        """Records status, preview and state for a passing probe."""
        aioresponses.get(f"{BASE_URL}/items?State=CA&page=1", status=200, body="ok")

        result = await probe_url(
            session,
            environment_name="dev",
            base_url=BASE_URL,
            path="/items?State=CA&page=1",
        )

        assert result.passed
        assert result.status_code == 200
        assert result.url == "http://dev.test/items?State=CA&page=1"
        assert result.response_body_preview == "ok"
        assert result.error_message is None
        assert result.state_param == "CA"
        assert result.duration_secs >= 0.0

    async def test_fails_on_status_error(
        self, session: aiohttp.ClientSession, aioresponses: aioresponses_cls
    ) -> None:
        """Non-2xx responses fail with the status message."""
        aioresponses.get(f"{BASE_URL}/missing", status=404, body="not here")

        result = await probe_url(
            session, environment_name="dev", base_url=BASE_URL, path="/missing"
        )

        assert not result.passed
        assert result.status_code == 404
        assert result.error_message == "HTTP Status Error: 404 Not Found"
        assert result.response_body_preview == "not here"
        assert result.state_param is None

    async def test_truncates_preview_to_100_characters(
        self, session: aiohttp.ClientSession, aioresponses: aioresponses_cls
    ) -> None:
        """Keeps the first 100 characters, not bytes."""
        body = "é" * 150
        aioresponses.get(
            f"{BASE_URL}/long",
            status=200,
            body=body,
            content_type="text/plain; charset=utf-8",
        )

        result = await probe_url(
            session, environment_name="dev", base_url=BASE_URL, path="/long"
        )

        assert result.response_body_preview == "é" * 100

    async def test_fails_on_app_error(
        self, session: aiohttp.ClientSession, aioresponses: aioresponses_cls
    ) -> None:
        """A 2xx body carrying the configured code fails."""
        aioresponses.get(
            f"{BASE_URL}/api",
            status=200,
            body='{"code":"50000","message":"Downstream unavailable"}',
        )

        result = await probe_url(
            session,
            environment_name="dev",
            base_url=BASE_URL,
            path="/api",
            app_error=AppErrorRule(key="code", code="50000"),
        )

        assert not result.passed
        assert result.status_code == 200
        assert result.error_message == (
            "App Error (code: 50000): Downstream unavailable"
        )

    async def test_app_error_without_json_message(
        self, session: aiohttp.ClientSession, aioresponses: aioresponses_cls
    ) -> None:
        """Reports a parsing failure when the body has no message."""
        aioresponses.get(
            f"{BASE_URL}/api", status=200, body='{"errorCode":"E1","detail":"x"}'
        )

        result = await probe_url(
            session,
            environment_name="dev",
            base_url=BASE_URL,
            path="/api",
            app_error=AppErrorRule(key="errorCode", code="E1"),
        )

        assert not result.passed
        assert result.error_message == (
            "App Error (errorCode: E1): message parsing failed."
        )

    async def test_connection_error_has_no_status(
        self, session: aiohttp.ClientSession, aioresponses: aioresponses_cls
    ) -> None:
        """Transport failures are recorded, not raised."""
        aioresponses.get(
            f"{BASE_URL}/down",
            exception=aiohttp.ClientConnectionError("Connection refused"),
        )

        result = await probe_url(
            session, environment_name="dev", base_url=BASE_URL, path="/down"
        )

        assert not result.passed
        assert result.status_code is None
        assert result.error_message == "Connection refused"
        assert result.response_body_preview == ""

    async def test_timeout_is_recorded(
        self, session: aiohttp.ClientSession, aioresponses: aioresponses_cls
    ) -> None:
        """Timeouts produce a failing result with a timeout message."""
        aioresponses.get(f"{BASE_URL}/slow", exception=TimeoutError())

        result = await probe_url(
            session, environment_name="dev", base_url=BASE_URL, path="/slow"
        )

        assert not result.passed
        assert result.status_code is None
        assert result.error_message == "Request timed out after 10s"

    async def test_body_read_failure_fails_probe(
        self, session: aiohttp.ClientSession, aioresponses: aioresponses_cls
    ) -> None:
        """A payload error mid-body fails the probe and leaves an empty preview."""
        aioresponses.get(f"{BASE_URL}/partial", status=200, body="truncated")

        with patch(
            "aiohttp.ClientResponse.text",
            new_callable=AsyncMock,
            side_effect=aiohttp.ClientPayloadError(
                "Response payload is not completed"
            ),
        ):
            result = await probe_url(
                session, environment_name="dev", base_url=BASE_URL, path="/partial"
            )

        assert not result.passed
        assert result.status_code == 200
        assert result.response_body_preview == ""
        assert result.error_message == (
            "Failed to read response body: Response payload is not completed"
        )

    async def test_invalid_utf8_body_passes_with_replacement(
        self, session: aiohttp.ClientSession, aioresponses: aioresponses_cls
    ) -> None:
        """Undecodable bytes are replaced rather than failing a healthy page."""
        aioresponses.get(
            f"{BASE_URL}/page",
            status=200,
            body=b"<html>caf\xe9 ok</html>",
            content_type="text/html; charset=utf-8",
        )

        result = await probe_url(
            session, environment_name="dev", base_url=BASE_URL, path="/page"
        )

        assert result.passed
        assert result.status_code == 200
        assert result.error_message is None
        assert result.response_body_preview == "<html>caf\ufffd ok</html>"

    async def test_unmatched_request_fails(
        self, session: aiohttp.ClientSession, aioresponses: aioresponses_cls
    ) -> None:
        """Requests with nothing listening fail with the client error text."""
        result = await probe_url(
            session, environment_name="dev", base_url=BASE_URL, path="/nothing"
        )

        assert not result.passed
        assert result.status_code is None
        assert result.error_message
