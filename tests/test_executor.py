"""Tests for the resilient request executor."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from marvin.core.exceptions import ClientConfigError, MarvinError
from marvin.execution.executor import RequestExecutor, parse_text
from tests.conftest import BASE_URL, MockSettings, make_response


def run(coro):
    return asyncio.run(coro)


class TestConfigValidation:
    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"API_TOKEN": ""}, "API token"),
            ({"API_TOKEN": "   "}, "API token"),
            ({"TIMEOUT_MS": 0}, "Timeout"),
            ({"TIMEOUT_MS": -1}, "Timeout"),
            ({"MAX_RETRIES": -1}, "Retries"),
            ({"RETRY_DELAY_MS": 0}, "Retry delay"),
        ],
    )
    def test_invalid_settings_fail_at_construction(self, overrides, message):
        with pytest.raises(ClientConfigError, match=message):
            RequestExecutor(MockSettings(**overrides))

    def test_zero_retries_is_valid(self, make_executor):
        assert make_executor(MAX_RETRIES=0).max_retries == 0

    def test_empty_endpoint_rejected(self, make_executor, transport):
        with pytest.raises(ValueError):
            run(make_executor().get(""))
        transport.assert_not_called()


class TestRetryBehavior:
    def test_server_errors_then_success(self, make_executor, transport, sleep_recorder):
        transport.side_effect = [
            make_response(500),
            make_response(500),
            make_response(200, json={"success": True}),
        ]

        result = run(make_executor(MAX_RETRIES=3, RETRY_DELAY_MS=100).get("/todayItems"))

        assert result == {"success": True}
        assert transport.call_count == 3
        assert sleep_recorder.delays_ms == [100, 200]

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 422])
    def test_client_errors_fail_fast(self, make_executor, transport, sleep_recorder, status):
        transport.return_value = make_response(status)

        with pytest.raises(MarvinError) as exc_info:
            run(make_executor(MAX_RETRIES=3).get("/habit?id=nope"))

        assert transport.call_count == 1
        assert sleep_recorder.delays_ms == []
        assert exc_info.value.status == status
        assert str(exc_info.value).startswith(f"HTTP {status}: ")

    def test_bad_request_message(self, make_executor, transport):
        transport.return_value = make_response(400)

        with pytest.raises(MarvinError, match=r"^HTTP 400: Bad Request$") as exc_info:
            run(make_executor().post("/addTask", {"title": ""}))

        assert exc_info.value.method == "POST"
        assert exc_info.value.endpoint == "/addTask"

    def test_rate_limit_is_retried(self, make_executor, transport, sleep_recorder):
        transport.side_effect = [make_response(429), make_response(200, json=[])]

        assert run(make_executor().get("/todayItems")) == []
        assert transport.call_count == 2
        assert sleep_recorder.delays_ms == [100]

    def test_retry_after_seconds_takes_precedence(self, make_executor, transport, sleep_recorder):
        transport.side_effect = [
            make_response(429, headers={"Retry-After": "2"}),
            make_response(200, json={"ok": 1}),
        ]

        assert run(make_executor(RETRY_DELAY_MS=100).get("/labels")) == {"ok": 1}
        assert sleep_recorder.delays_ms == [2000]

    def test_retry_after_zero_is_honored(self, make_executor, transport, sleep_recorder):
        transport.side_effect = [
            make_response(503, headers={"Retry-After": "0"}),
            make_response(200, json={}),
        ]

        run(make_executor(RETRY_DELAY_MS=100).get("/labels"))
        assert sleep_recorder.delays_ms == [0]

    def test_unparseable_retry_after_falls_back_to_backoff(self, make_executor, transport, sleep_recorder):
        transport.side_effect = [
            make_response(503, headers={"Retry-After": "later"}),
            make_response(503),
            make_response(200, json={}),
        ]

        run(make_executor(RETRY_DELAY_MS=50).get("/labels"))
        assert sleep_recorder.delays_ms == [50, 100]

    def test_exhaustion_surfaces_last_failure(self, make_executor, transport, sleep_recorder):
        transport.side_effect = [make_response(500), make_response(502), make_response(503)]

        with pytest.raises(MarvinError, match="HTTP 503: Service Unavailable") as exc_info:
            run(make_executor(MAX_RETRIES=2, RETRY_DELAY_MS=100).get("/todayItems"))

        assert transport.call_count == 3
        assert exc_info.value.status == 503
        assert sleep_recorder.delays_ms == [100, 200]

    def test_persistent_failure_uses_all_attempts(self, make_executor, transport, sleep_recorder):
        transport.return_value = make_response(500)

        with pytest.raises(MarvinError, match="HTTP 500: Internal Server Error"):
            run(make_executor(MAX_RETRIES=3, RETRY_DELAY_MS=100).get("/todayItems"))

        assert transport.call_count == 4
        assert sleep_recorder.delays_ms == [100, 200, 400]

    def test_zero_retries_single_attempt(self, make_executor, transport, sleep_recorder):
        transport.return_value = make_response(500)

        with pytest.raises(MarvinError):
            run(make_executor(MAX_RETRIES=0).get("/todayItems"))

        assert transport.call_count == 1
        assert sleep_recorder.delays_ms == []


class TestTransportFaults:
    def test_network_error_is_retried(self, make_executor, transport, sleep_recorder):
        transport.side_effect = [
            httpx.ConnectError("connect ECONNREFUSED", request=httpx.Request("GET", BASE_URL)),
            make_response(200, json={"success": True}),
        ]

        assert run(make_executor().get("/todayItems")) == {"success": True}
        assert transport.call_count == 2
        assert sleep_recorder.delays_ms == [100]

    def test_network_error_exhaustion(self, make_executor, transport):
        transport.side_effect = OSError("getaddrinfo ENOTFOUND")

        with pytest.raises(MarvinError) as exc_info:
            run(make_executor(MAX_RETRIES=1).get("/todayItems"))

        err = exc_info.value
        assert transport.call_count == 2
        assert err.status == 0
        assert err.status_text == "Network Error"
        assert err.message == "getaddrinfo ENOTFOUND"

    def test_marvin_error_from_transport_is_reused(self, make_executor, transport):
        custom = MarvinError.build(
            message="Custom server error",
            status=502,
            status_text="Bad Gateway",
            endpoint="/test",
            method="GET",
        )
        transport.side_effect = [custom, make_response(200, json={"success": True})]

        assert run(make_executor().get("/todayItems")) == {"success": True}
        assert transport.call_count == 2

    def test_reused_client_error_from_transport_fails_fast(self, make_executor, transport):
        custom = MarvinError.build(
            message="nope", status=403, status_text="Forbidden", endpoint="/x", method="GET"
        )
        transport.side_effect = custom

        with pytest.raises(MarvinError) as exc_info:
            run(make_executor().get("/todayItems"))

        assert exc_info.value is custom
        assert transport.call_count == 1

    def test_timeout_aborts_attempt(self, make_executor, transport):
        async def hang(url, request):
            await asyncio.sleep(10)

        transport.side_effect = hang

        with pytest.raises(MarvinError, match="aborted") as exc_info:
            run(make_executor(TIMEOUT_MS=20, MAX_RETRIES=1).get("/todayItems"))

        assert exc_info.value.status == 0
        assert exc_info.value.is_retryable()
        assert transport.call_count == 2

    def test_transport_timeout_error_keeps_its_message(self, make_executor, transport):
        transport.side_effect = TimeoutError("connect timed out (socket)")

        with pytest.raises(MarvinError) as exc_info:
            run(make_executor(MAX_RETRIES=1).get("/todayItems"))

        assert exc_info.value.message == "connect timed out (socket)"
        assert exc_info.value.status == 0
        assert exc_info.value.status_text == "Network Error"
        assert transport.call_count == 2

    def test_slow_but_in_time_response_succeeds(self, make_executor, transport):
        async def slow(url, request):
            await asyncio.sleep(0.01)
            return make_response(200, json={"ok": True})

        transport.side_effect = slow

        assert run(make_executor(TIMEOUT_MS=2000).get("/me")) == {"ok": True}


class TestParseFaults:
    def test_parser_fault_is_not_retried(self, make_executor, transport, sleep_recorder):
        transport.return_value = make_response(200, text="")

        def broken_parser(response):
            raise ValueError("unexpected end of input")

        with pytest.raises(ValueError, match="unexpected end of input"):
            run(make_executor(MAX_RETRIES=3).request("/todayItems", parser=broken_parser))

        assert transport.call_count == 1
        assert sleep_recorder.delays_ms == []

    def test_empty_json_body_propagates_decode_error(self, make_executor, transport):
        transport.return_value = make_response(200, text="")

        with pytest.raises(json.JSONDecodeError):
            run(make_executor().get("/trackedItem"))

        assert transport.call_count == 1

    def test_malformed_json(self, make_executor, transport):
        transport.return_value = make_response(200, text="{not json")

        with pytest.raises(json.JSONDecodeError):
            run(make_executor().get("/labels"))

    def test_text_parser(self, make_executor, transport):
        transport.return_value = make_response(200, text="OK")

        assert run(make_executor().get_text("/test")) == "OK"
        assert run(make_executor().request("/test", method="POST", parser=parse_text)) == "OK"


class TestRequestShape:
    def test_url_headers_and_body(self, make_executor, transport):
        transport.return_value = make_response(200, json={})

        run(make_executor().post("/addTask", {"title": "Buy milk", "done": False}, {"X-Auto-Complete": "false"}))

        url, request = transport.call_args.args
        assert url == f"{BASE_URL}/addTask"
        assert request.method == "POST"
        assert request.headers["X-API-Token"] == "test-token"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["X-Auto-Complete"] == "false"
        assert json.loads(request.content) == {"title": "Buy milk", "done": False}

    def test_get_has_no_body(self, make_executor, transport):
        transport.return_value = make_response(200, json=[])

        run(make_executor().get("/labels"))

        _, request = transport.call_args.args
        assert request.method == "GET"
        assert request.content is None

    def test_header_precedence(self, make_executor, transport):
        transport.return_value = make_response(200, json={})

        run(make_executor().request(
            "/me",
            extra_headers={"Content-Type": "text/plain", "X-Date": "2024-01-01"},
            headers={"X-Date": "2024-02-02"},
        ))

        _, request = transport.call_args.args
        assert request.headers["Content-Type"] == "text/plain"
        assert request.headers["X-Date"] == "2024-02-02"
        assert request.headers["X-API-Token"] == "test-token"

    def test_method_is_normalized(self, make_executor, transport):
        transport.return_value = make_response(200, json={})

        run(make_executor().request("/me", method="delete"))

        _, request = transport.call_args.args
        assert request.method == "DELETE"


class TestConcurrency:
    def test_independent_calls_run_concurrently(self, make_executor, transport):
        async def respond(url, request):
            await asyncio.sleep(0.01)
            if url.endswith("/fail"):
                return make_response(404)
            return make_response(200, json={"url": url})

        transport.side_effect = respond
        executor = make_executor()

        async def scenario():
            return await asyncio.gather(
                executor.get("/a"),
                executor.get("/b"),
                executor.get("/fail"),
                return_exceptions=True,
            )

        a, b, failed = run(scenario())
        assert a == {"url": f"{BASE_URL}/a"}
        assert b == {"url": f"{BASE_URL}/b"}
        assert isinstance(failed, MarvinError) and failed.status == 404

    def test_external_cancellation_propagates(self, make_executor, transport):
        async def hang(url, request):
            await asyncio.sleep(10)

        transport.side_effect = hang
        executor = make_executor(TIMEOUT_MS=5000)

        async def scenario():
            await asyncio.wait_for(executor.get("/todayItems"), timeout=0.02)

        with pytest.raises(asyncio.TimeoutError):
            run(scenario())
        assert transport.call_count == 1
