"""Common test fixtures for the oiapi project."""

import json
import typing as t

import pytest
from pytest_httpserver import HTTPServer
from werkzeug import Request, Response

from oiapi import Client, ClientConfig, Executor


@pytest.fixture
def client_config(httpserver: HTTPServer) -> ClientConfig:
    """Test fixture providing a configuration that targets the local server."""
    return ClientConfig(host=f"localhost:{httpserver.port}")


@pytest.fixture
def client(client_config: ClientConfig) -> Client:
    """Test fixture providing a default Client bound to the local server."""
    return Client(config=client_config)


@pytest.fixture
def executor() -> Executor:
    """Test fixture providing a default Executor."""
    return Executor()


def echo_request(request: Request) -> Response:
    """Handler answering with a JSON description of the received request."""
    body = request.get_data(as_text=True)
    files = {name: storage.filename for name, storage in request.files.items()}
    payload = {
        "method": request.method,
        "path": request.path,
        "query": request.query_string.decode(),
        "headers": dict(request.headers.items()),
        "body": body,
        "form": dict(request.form.items()),
        "files": files,
    }
    return Response(json.dumps(payload), content_type="application/json")


@pytest.fixture
def echo_url(httpserver: HTTPServer) -> t.Callable[[str], str]:
    """Test fixture registering echo handlers; returns the relative path to request."""

    def register(path: str) -> str:
        httpserver.expect_request(f"/api/{path}").respond_with_handler(echo_request)
        return path

    return register
