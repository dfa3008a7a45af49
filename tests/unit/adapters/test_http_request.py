"""Unit tests for the fluent HTTP Request builder."""

from __future__ import annotations

import dataclasses
import io
import json
import string
from typing import Any, Callable

import httpx
import pytest
import respx
from hypothesis import given, settings
from hypothesis import strategies as st

from servicekit.adapters.http import (
    Client,
    InvalidEncodeFnError,
    Request,
    RequestAlreadyExecutedError,
    basic_auth,
    bearer_token_auth,
    header_auth,
    retry_client_timeout,
    retry_status,
    status_created,
    status_in,
    status_not_found,
    status_ok,
)
from servicekit.kernel.context import Context, ContextCancelledError
from servicekit.kernel.errors import ClientError, RetryableError
from servicekit.resilience.backoff import init_backoff, max_calls, new_runner

BASE = "https://api.test"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class _Recorder:
    """MockTransport handler replaying *responses*; the last one repeats."""

    def __init__(self, *responses: httpx.Response | Exception) -> None:
        self._responses = list(responses) or [httpx.Response(200)]
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self._responses[min(len(self.requests), len(self._responses)) - 1]
        if isinstance(item, Exception):
            raise item
        return item


class _TrackedStream(httpx.SyncByteStream):
    def __init__(self, body: bytes) -> None:
        self.body = body
        self.closed = False

    def __iter__(self):
        yield self.body

    def close(self) -> None:
        self.closed = True


def _client(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> Client:
    return Client(httpx.Client(transport=httpx.MockTransport(handler)), base_url=BASE, **kwargs)


def _fast_runner(calls: int):
    return new_runner(init_backoff(1e-9), max_calls(calls))


# ---------------------------------------------------------------------------
# Request construction
# ---------------------------------------------------------------------------


class TestRequestConstruction:
    def test_method_and_address(self) -> None:
        rec = _Recorder()
        _client(rec).patch("/jobs/7").do()
        assert rec.requests[0].method == "PATCH"
        assert str(rec.requests[0].url) == f"{BASE}/jobs/7"

    def test_header_last_wins(self) -> None:
        rec = _Recorder()
        _client(rec).get("/x").header("X-Mode", "a").header("X-Mode", "b").do()
        assert rec.requests[0].headers.get_list("X-Mode") == ["b"]

    @settings(max_examples=50)
    @given(
        key=st.text(alphabet=string.ascii_letters, min_size=1, max_size=12),
        first=st.text(alphabet=string.ascii_letters + string.digits, min_size=1, max_size=16),
        second=st.text(alphabet=string.ascii_letters + string.digits, min_size=1, max_size=16),
    )
    def test_header_and_query_last_wins_property(self, key: str, first: str, second: str) -> None:
        rec = _Recorder()
        (
            _client(rec)
            .get("/x")
            .header(f"X-{key}", first)
            .header(f"X-{key}", second)
            .query_param(key, first)
            .query_param(key, second)
            .do()
        )
        sent = rec.requests[0]
        assert sent.headers.get_list(f"X-{key}") == [second]
        assert sent.url.params.get_list(key) == [second]

    def test_query_params_pairs_and_odd_trailing_key(self) -> None:
        rec = _Recorder()
        _client(rec).get("/x?keep=1").query_params("a", "1", "b", "2", "dangling").do()
        params = rec.requests[0].url.params
        assert params["a"] == "1"
        assert params["b"] == "2"
        assert params["keep"] == "1"
        assert "dangling" not in params

    def test_content_type(self) -> None:
        rec = _Recorder()
        _client(rec).put("/x").body(b"<xml/>").content_type("application/xml").do()
        assert rec.requests[0].headers["Content-Type"] == "application/xml"

    def test_content_length_override(self) -> None:
        rec = _Recorder()
        _client(rec).post("/x").body(b"hello world").content_length(5).do()
        assert rec.requests[0].headers["Content-Length"] == "5"

    def test_zero_content_length_is_not_applied(self) -> None:
        rec = _Recorder()
        _client(rec).post("/x").body(b"hello").content_length(0).do()
        assert rec.requests[0].headers["Content-Length"] == "5"

    def test_context_deadline_caps_timeouts(self) -> None:
        rec = _Recorder()
        ctx = Context.background().with_timeout(2.0)
        _client(rec).get("/x").do(ctx)
        timeouts = rec.requests[0].extensions["timeout"]
        assert all(0 < timeouts[phase] <= 2.0 for phase in ("connect", "read", "write", "pool"))


# ---------------------------------------------------------------------------
# Bodies
# ---------------------------------------------------------------------------


class TestBodies:
    def test_object_is_json_encoded(self) -> None:
        rec = _Recorder()
        _client(rec).post("/jobs").body({"name": "thumb", "n": 2}).do()
        assert rec.requests[0].content == b'{"name":"thumb","n":2}\n'

    def test_bytes_sent_raw(self) -> None:
        rec = _Recorder()
        _client(rec).post("/blob").body(b"\x00\x01raw").do()
        assert rec.requests[0].content == b"\x00\x01raw"

    def test_custom_encoder(self) -> None:
        rec = _Recorder()
        _client(rec).post("/x").encode(lambda v: str(v).upper().encode()).body("abc").do()
        assert rec.requests[0].content == b"ABC"

    def test_reader_reset_to_zero_on_every_attempt(self) -> None:
        rec = _Recorder(httpx.Response(503), httpx.Response(200))
        client = _client(rec, reset_seeker_to_zero=True)
        client.put("/upload").body(io.BytesIO(b"payload")).retry_status(status_in(503)).backoff(_fast_runner(3)).do()
        assert [r.content for r in rec.requests] == [b"payload", b"payload"]

    def test_seek_params_override_client_reset(self) -> None:
        rec = _Recorder()
        client = _client(rec, reset_seeker_to_zero=True)
        client.put("/upload").body(io.BytesIO(b"0123456789")).seek_params(4).do()
        assert rec.requests[0].content == b"456789"

    def test_missing_encoder(self) -> None:
        rec = _Recorder()
        req = Request("POST", f"{BASE}/x", httpx.Client(transport=httpx.MockTransport(rec)))
        with pytest.raises(ClientError) as info:
            req.body({"a": 1}).do()
        assert info.value.op == "encode body"
        assert isinstance(info.value.cause, InvalidEncodeFnError)
        assert rec.requests == []

    def test_encoder_failure(self) -> None:
        def broken(_: Any) -> bytes:
            raise ValueError("cannot encode")

        with pytest.raises(ClientError, match="cannot encode") as info:
            _client(_Recorder()).post("/x").encode(broken).body(object()).do()
        assert info.value.op == "encode body"


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class TestAuth:
    def test_bearer_from_client(self) -> None:
        rec = _Recorder()
        _client(rec, auth=bearer_token_auth("tok")).get("/x").do()
        assert rec.requests[0].headers["Authorization"] == "Bearer tok"

    def test_basic(self) -> None:
        rec = _Recorder()
        _client(rec).get("/x").auth(basic_auth("user", "pass")).do()
        assert rec.requests[0].headers["Authorization"] == "Basic dXNlcjpwYXNz"

    def test_header_auth(self) -> None:
        rec = _Recorder()
        _client(rec).get("/x").auth(header_auth("X-Api-Key", "k1")).do()
        assert rec.requests[0].headers["X-Api-Key"] == "k1"

    def test_request_can_drop_client_auth(self) -> None:
        rec = _Recorder()
        _client(rec, auth=bearer_token_auth("tok")).get("/x").auth(None).do()
        assert "Authorization" not in rec.requests[0].headers


# ---------------------------------------------------------------------------
# Status classification
# ---------------------------------------------------------------------------


class TestStatusClassification:
    def test_any_2xx_is_success_by_default(self) -> None:
        assert _client(_Recorder(httpx.Response(201))).post("/x").do() is None

    def test_explicit_success_predicates(self) -> None:
        with pytest.raises(ClientError) as info:
            _client(_Recorder(httpx.Response(201))).post("/x").success(status_ok).do()
        assert info.value.op == "status code"
        assert info.value.status_code == 201

    def test_not_found_and_exists_traits(self) -> None:
        with pytest.raises(ClientError) as info:
            (
                _client(_Recorder(httpx.Response(422)))
                .post("/x")
                .not_found(status_not_found)
                .exists(status_in(422))
                .do()
            )
        assert info.value.exists is True
        assert info.value.not_found is False
        assert info.value.retryable is False

    def test_meta_rendered_into_error(self) -> None:
        with pytest.raises(ClientError) as info:
            _client(_Recorder(httpx.Response(500))).get("/x").meta("job", "7", "step", "probe").do()
        assert 'job="7" step="probe"' in str(info.value)

    def test_on_error_decodes_payload(self) -> None:
        rec = _Recorder(httpx.Response(400, json={"error": "bad name"}))
        with pytest.raises(ClientError) as info:
            _client(rec).post("/x").on_error(lambda body: json.load(body)).do()
        assert info.value.detail == {"error": {"error": "bad name"}}
        assert "bad name" in info.value.response_body

    def test_on_error_failure_becomes_cause(self) -> None:
        rec = _Recorder(httpx.Response(502, text="<html>gateway</html>"))
        with pytest.raises(ClientError) as info:
            _client(rec).get("/x").on_error(lambda body: json.load(body)).do()
        assert isinstance(info.value.cause, json.JSONDecodeError)
        assert "gateway" in info.value.response_body

    def test_response_headers_observer(self) -> None:
        seen: list[httpx.Headers] = []
        rec = _Recorder(httpx.Response(200, headers={"ETag": "v1"}))
        _client(rec).get("/x").response_headers(seen.append).do()
        assert seen[0]["ETag"] == "v1"

    @respx.mock
    def test_retry_status_not_in_exhausts_attempts(self) -> None:
        route = respx.get(f"{BASE}/flaky").mock(return_value=httpx.Response(500))
        client = Client(httpx.Client(), base_url=BASE, backoff=_fast_runner(3))
        with pytest.raises(ClientError) as info:
            client.get("/flaky").retry_status_not_in(204).do()
        assert route.call_count == 3
        assert info.value.retryable is True
        assert info.value.status_code == 500

    @respx.mock
    def test_delete_not_found(self) -> None:
        route = respx.delete(f"{BASE}/jobs/9").mock(return_value=httpx.Response(404))
        client = Client(httpx.Client(), base_url=BASE, backoff=_fast_runner(3))
        with pytest.raises(ClientError) as info:
            client.delete("/jobs/9").not_found(status_in(404)).do()
        assert route.call_count == 1
        assert info.value.retryable is False
        assert info.value.not_found is True

    def test_retry_then_success(self) -> None:
        rec = _Recorder(httpx.Response(503), httpx.Response(503), httpx.Response(200, json={"ok": True}))
        result = (
            _client(rec, backoff=_fast_runner(5))
            .get("/x")
            .retry(retry_status(status_in(503)))
            .decode_json()
            .do()
        )
        assert result == {"ok": True}
        assert len(rec.requests) == 3


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


@dataclasses.dataclass
class _Job:
    id: int
    name: str


class TestDecoding:
    def test_decode_json_into_dataclass(self) -> None:
        rec = _Recorder(httpx.Response(201, json={"id": 3, "name": "thumb"}))
        job = _client(rec).post("/jobs").success(status_created).decode_json(_Job).do()
        assert job == _Job(id=3, name="thumb")

    def test_decode_failure(self) -> None:
        rec = _Recorder(httpx.Response(200, text="not json"))
        with pytest.raises(ClientError) as info:
            _client(rec).get("/x").decode_json().do()
        assert info.value.op == "decode"
        assert info.value.retryable is False
        assert info.value.status_code == 200

    def test_retryable_decode_failure(self) -> None:
        def decode(_: Any) -> Any:
            raise RetryableError(ValueError("truncated"))

        rec = _Recorder(httpx.Response(200, text="{"), httpx.Response(200, text="{}"))
        calls: list[int] = []

        def count(body: Any) -> Any:
            calls.append(1)
            if len(calls) == 1:
                return decode(body)
            return json.load(body)

        assert _client(rec, backoff=_fast_runner(3)).get("/x").decode(count).do() == {}
        assert len(rec.requests) == 2


# ---------------------------------------------------------------------------
# Transport failures
# ---------------------------------------------------------------------------


class TestTransportFailures:
    def test_connect_error_not_retried_by_default(self) -> None:
        rec = _Recorder(httpx.ConnectError("refused"))
        with pytest.raises(ClientError) as info:
            _client(rec, backoff=_fast_runner(3)).get("/x").do()
        assert info.value.op == "do"
        assert info.value.method == "GET"
        assert len(rec.requests) == 1

    def test_retry_response_errors(self) -> None:
        rec = _Recorder(httpx.ConnectError("refused"))
        with pytest.raises(ClientError) as info:
            _client(rec, backoff=_fast_runner(2)).get("/x").retry_response_errors().do()
        assert info.value.retryable is True
        assert len(rec.requests) == 2

    def test_retry_client_timeout(self) -> None:
        rec = _Recorder(httpx.ReadTimeout("slow"), httpx.Response(200))
        _client(rec, backoff=_fast_runner(3)).get("/x").retry(retry_client_timeout()).do()
        assert len(rec.requests) == 2

    def test_client_timeout_policy_ignores_other_errors(self) -> None:
        rec = _Recorder(httpx.ConnectError("refused"))
        with pytest.raises(ClientError) as info:
            _client(rec, backoff=_fast_runner(3)).get("/x").retry(retry_client_timeout()).do()
        assert info.value.retryable is False
        assert len(rec.requests) == 1

    def test_non_httpx_failure_is_do_error(self) -> None:
        rec = _Recorder(OSError("socket exploded"))
        with pytest.raises(ClientError) as info:
            _client(rec).get("/x").do()
        assert info.value.op == "do"
        assert isinstance(info.value.cause, OSError)
        assert "socket exploded" in str(info.value)

    def test_non_httpx_failure_goes_through_response_error(self) -> None:
        rec = _Recorder(OSError("socket exploded"))
        with pytest.raises(ClientError) as info:
            _client(rec, backoff=_fast_runner(2)).get("/x").retry_response_errors().do()
        assert info.value.retryable is True
        assert len(rec.requests) == 2

    def test_invalid_url_is_new_req_error(self) -> None:
        rec = _Recorder()
        client = Client(httpx.Client(transport=httpx.MockTransport(rec)), base_url="http://example.com:abc")
        with pytest.raises(ClientError) as info:
            client.get("/x").meta("k", "v").do()
        assert info.value.op == "new req"
        assert 'k="v"' in str(info.value)


# ---------------------------------------------------------------------------
# Streaming and single use
# ---------------------------------------------------------------------------


class TestStreamingAndSingleUse:
    def test_reader_is_left_open(self) -> None:
        rec = _Recorder(httpx.Response(200, stream=_TrackedStream(b"frame-data")))
        response = _client(rec).get("/video").do_and_get_reader()
        try:
            assert response.read() == b"frame-data"
        finally:
            response.close()

    def test_failed_classification_closes_stream(self) -> None:
        stream = _TrackedStream(b"oops")
        rec = _Recorder(httpx.Response(500, stream=stream))
        with pytest.raises(ClientError) as info:
            _client(rec).get("/video").do_and_get_reader()
        assert stream.closed is True
        assert info.value.response_body == "oops"

    def test_second_execution_rejected(self) -> None:
        req = _client(_Recorder()).get("/x")
        req.do()
        with pytest.raises(RequestAlreadyExecutedError):
            req.do()
        with pytest.raises(RequestAlreadyExecutedError):
            req.do_and_get_reader()

    def test_failing_headers_observer_closes_stream(self) -> None:
        stream = _TrackedStream(b"frame-data")
        rec = _Recorder(httpx.Response(200, stream=stream))

        def observer(headers: httpx.Headers) -> None:
            raise RuntimeError("observer failed")

        with pytest.raises(RuntimeError):
            _client(rec).get("/video").response_headers(observer).do_and_get_reader()
        assert stream.closed is True


# ---------------------------------------------------------------------------
# Cancellation while the call is in flight
# ---------------------------------------------------------------------------


class TestInFlightCancellation:
    def test_cancel_during_call_discards_response(self) -> None:
        ctx = Context.background().with_cancel()

        def handler(request: httpx.Request) -> httpx.Response:
            ctx.cancel()
            return httpx.Response(200, json={"ok": True})

        with pytest.raises(ContextCancelledError):
            _client(handler).get("/x").decode_json().do(ctx)

    def test_cancel_during_call_stops_retries(self) -> None:
        ctx = Context.background().with_cancel()
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            ctx.cancel()
            return httpx.Response(500)

        with pytest.raises(ContextCancelledError):
            _client(handler, backoff=_fast_runner(3)).get("/x").retry_status(status_in(500)).do(ctx)
        assert len(calls) == 1

    def test_cancel_during_streaming_call_closes_response(self) -> None:
        ctx = Context.background().with_cancel()
        stream = _TrackedStream(b"frame-data")

        def handler(request: httpx.Request) -> httpx.Response:
            ctx.cancel()
            return httpx.Response(200, stream=stream)

        with pytest.raises(ContextCancelledError):
            _client(handler).get("/video").do_and_get_reader(ctx)
        assert stream.closed is True
