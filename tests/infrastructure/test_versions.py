"""Tests for README requirement lines and index lookups."""

from collections.abc import Callable

import httpx
import pytest

from grpcwiz.config.models import VersionsConfig
from grpcwiz.domain.errors import ErrorCode, GenerationError
from grpcwiz.infrastructure.versions import fallback_requirements, resolve_requirements

LATEST = {"grpcio": "1.66.1", "grpcio-tools": "1.66.1", "protobuf": "5.28.2"}


def _index(request: httpx.Request) -> httpx.Response:
    package = request.url.path.split("/")[-2]
    if package not in LATEST:
        return httpx.Response(404)
    return httpx.Response(200, json={"info": {"version": LATEST[package]}})


def _client(handler: Callable[[httpx.Request], httpx.Response] = _index) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestFallback:
    def test_default_specifiers(self) -> None:
        assert fallback_requirements(VersionsConfig()) == [
            "grpcio>=1.60",
            "grpcio-tools>=1.60",
            "protobuf>=4.25",
        ]

    def test_no_network_when_not_resolving(self) -> None:
        def boom(request: httpx.Request) -> httpx.Response:
            raise AssertionError("index must not be queried")

        lines = resolve_requirements(VersionsConfig(), client=_client(boom))
        assert lines[0] == "grpcio>=1.60"

    def test_package_without_fallback(self) -> None:
        config = VersionsConfig(packages=("grpcio-status",), fallback={})
        assert fallback_requirements(config) == ["grpcio-status"]


class TestResolve:
    def test_pins_latest(self) -> None:
        lines = resolve_requirements(VersionsConfig(resolve=True), client=_client())
        assert lines == ["grpcio==1.66.1", "grpcio-tools==1.66.1", "protobuf==5.28.2"]

    def test_queries_index_url(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return _index(request)

        config = VersionsConfig(
            resolve=True, index_url="https://mirror.example/pypi/", packages=("grpcio",)
        )
        resolve_requirements(config, client=_client(handler))
        assert seen == ["https://mirror.example/pypi/grpcio/json"]

    def test_http_error(self) -> None:
        config = VersionsConfig(resolve=True, packages=("grpcio", "missing-package"))
        with pytest.raises(GenerationError) as excinfo:
            resolve_requirements(config, client=_client())
        assert excinfo.value.code is ErrorCode.VERSION_LOOKUP_FAILED
        assert excinfo.value.detail == {"package": "missing-package"}

    def test_transport_error(self) -> None:
        def offline(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("offline", request=request)

        with pytest.raises(GenerationError) as excinfo:
            resolve_requirements(VersionsConfig(resolve=True), client=_client(offline))
        assert excinfo.value.code is ErrorCode.VERSION_LOOKUP_FAILED

    def test_missing_version_field(self) -> None:
        def empty(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"info": {}})

        with pytest.raises(GenerationError, match="No version"):
            resolve_requirements(VersionsConfig(resolve=True), client=_client(empty))
