"""Tests for decoding request specs into requests."""

import gzip
import io
import re

import pytest
from pydantic import ValidationError

from preheat.http import (
    BodyResolutionError,
    GzipBodyStream,
    HTTPMethod,
    MalformedSpecError,
    Request,
    RequestSpecError,
    UnsupportedMethodError,
    to_http_request,
)


def read_body(request: Request) -> bytes:
    assert request.body is not None
    with request.body:
        return request.body.read()


@pytest.mark.unit
class TestToHTTPRequest:
    """Test to_http_request decoding."""

    def test_inline_body(self) -> None:
        request = to_http_request('post:/db:{"db": "true"}')

        assert request.method is HTTPMethod.POST
        assert request.path == "/db"
        assert read_body(request) == b'{"db": "true"}'

    def test_body_from_file(self, body_file) -> None:
        path = body_file('{"foo": "bar"}')

        request = to_http_request(f"post:/db:file:{path}")

        assert request.method is HTTPMethod.POST
        assert request.path == "/db"
        assert read_body(request) == b'{"foo": "bar"}'

    def test_without_body(self) -> None:
        request = to_http_request("get:ping")

        assert request.method is HTTPMethod.GET
        assert request.path == "ping"
        assert request.body is None
        assert request.is_compressed is False

    def test_empty_body_segment_gives_empty_body(self) -> None:
        request = to_http_request("post:/db:")

        assert request.body is not None
        assert read_body(request) == b""

    def test_empty_path_is_preserved(self) -> None:
        request = to_http_request("get:")

        assert request.path == ""
        assert request.body is None

    def test_body_keeps_colons(self) -> None:
        request = to_http_request('put:/items/1:{"url": "http://example.com:8080"}')

        assert request.path == "/items/1"
        assert read_body(request) == b'{"url": "http://example.com:8080"}'

    @pytest.mark.parametrize("method", ["get", "Get", "GET", "options", "tRaCe"])
    def test_method_is_case_insensitive(self, method: str) -> None:
        request = to_http_request(f"{method}:/ping:body")

        assert request.method.value == method.upper()

    @pytest.mark.parametrize("spec", ["", "get", "/ping", "post/db"])
    def test_malformed_spec(self, spec: str) -> None:
        with pytest.raises(MalformedSpecError) as exc_info:
            to_http_request(spec)

        assert exc_info.value.spec == spec
        assert "<http-method>:<path>[:body]" in str(exc_info.value)

    def test_unsupported_method(self) -> None:
        with pytest.raises(UnsupportedMethodError) as exc_info:
            to_http_request("hmm:/ping:all=true")

        error = exc_info.value
        assert error.method == "HMM"
        assert error.spec == "hmm:/ping:all=true"
        assert "method HMM is not supported" in str(error)

    def test_missing_body_file(self, tmp_path) -> None:
        missing = tmp_path / "missing.json"
        spec = f"post:/db:file:{missing}"

        with pytest.raises(BodyResolutionError) as exc_info:
            to_http_request(spec)

        error = exc_info.value
        assert error.segment == f"file:{missing}"
        assert error.spec == spec
        assert isinstance(error.__cause__, FileNotFoundError)

    @pytest.mark.parametrize("gzip_compression", [False, True])
    def test_unencodable_body(self, gzip_compression: bool) -> None:
        # lone surrogates come from undecodable bytes in argv
        spec = "post:/a:\udcff"

        with pytest.raises(BodyResolutionError) as exc_info:
            to_http_request(spec, gzip_compression=gzip_compression)

        assert exc_info.value.segment == "\udcff"
        assert isinstance(exc_info.value.__cause__, UnicodeEncodeError)

    def test_errors_share_a_base_class(self) -> None:
        for spec in ("nope", "hmm:/ping"):
            with pytest.raises(RequestSpecError):
                to_http_request(spec)

    def test_gzip_compression_round_trip(self) -> None:
        request = to_http_request('post:/db:{"db": "true"}', gzip_compression=True)

        assert isinstance(request.body, GzipBodyStream)
        assert request.is_compressed is True
        assert gzip.decompress(read_body(request)) == b'{"db": "true"}'

    def test_gzip_compression_of_file_body(self, body_file) -> None:
        content = '{"items": [' + ", ".join(str(i) for i in range(5000)) + "]}"
        path = body_file(content)

        request = to_http_request(f"post:/bulk:file:{path}", gzip_compression=True)

        assert gzip.decompress(read_body(request)).decode("utf-8") == content

    def test_timestamp_interpolation(self) -> None:
        request = to_http_request(
            'post:/path_{$currentTimestamp}:{"body": "{$currentTimestamp}"}'
        )
        body = read_body(request).decode("utf-8")

        assert re.fullmatch(r"/path_\d{13}", request.path)
        assert re.fullmatch(r'\{"body": "\d{13}"\}', body)
        assert len(request.path) == 19
        assert len(body) == 25

    def test_range_and_random_interpolation(self) -> None:
        request = to_http_request(
            "post:/path_{$range|min=1,max=2}_{$random|foo,bar}"
            ':{"body": "{$random|foo,bar} {$range|min=1,max=2}"}'
        )
        body = read_body(request).decode("utf-8")

        assert re.fullmatch(r"/path_[12]_(foo|bar)", request.path)
        assert re.fullmatch(r'\{"body": "(foo|bar) [12]"\}', body)


@pytest.mark.unit
class TestCollaborators:
    """Test that the expander and resolver can be swapped."""

    def test_expander_applied_to_path_and_body(self) -> None:
        seen: list[str] = []

        def expand(text: str) -> str:
            seen.append(text)
            return text.upper()

        request = to_http_request("post:/a:b", expand=expand)

        assert seen == ["/a", "b"]
        assert request.path == "/A"
        assert read_body(request) == b"B"

    def test_expander_runs_after_resolver(self) -> None:
        request = to_http_request(
            "post:/a:ref",
            expand=lambda text: text.replace("{x}", "1"),
            resolve_body=lambda segment: "value={x}",
        )

        assert read_body(request) == b"value=1"

    def test_resolver_not_called_without_body(self) -> None:
        def resolve(segment: str) -> str:
            raise AssertionError("resolver must not be called")

        request = to_http_request("get:/a", resolve_body=resolve)

        assert request.body is None

    def test_resolver_value_error_is_wrapped(self) -> None:
        def resolve(segment: str) -> str:
            raise ValueError("bad encoding")

        with pytest.raises(BodyResolutionError) as exc_info:
            to_http_request("post:/a:file:x", resolve_body=resolve)

        assert isinstance(exc_info.value.__cause__, ValueError)


@pytest.mark.unit
class TestRequestModel:
    """Test the Request model."""

    def test_is_frozen(self) -> None:
        request = Request(method=HTTPMethod.GET, path="/")

        with pytest.raises(ValidationError):
            request.path = "/other"  # type: ignore[misc]

    def test_rejects_unknown_method(self) -> None:
        with pytest.raises(ValidationError):
            Request(method="HMM", path="/")  # type: ignore[arg-type]

    def test_accepts_any_binary_stream(self) -> None:
        request = Request(method=HTTPMethod.PUT, path="/", body=io.BytesIO(b"x"))

        assert request.is_compressed is False
        assert "has_body=True" in repr(request)
