"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from collections import Counter
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest

from binr.core.config.settings import BinrConfig

TESTBIN = b"#!/bin/sh\necho OK\n"


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


@dataclass
class Route:
    body: bytes
    status: int = 200
    content_type: str = "application/octet-stream"
    # Advertised Content-Length, when it should differ from the body sent
    declared_length: int | None = None


@dataclass
class BinaryServer:
    """A localhost HTTP server with programmable routes and a hit counter."""

    address: str
    routes: dict[str, Route] = field(default_factory=dict)
    hits: Counter = field(default_factory=Counter)

    def url(self, path: str) -> str:
        return f"http://{self.address}{path}"

    def serve(
        self,
        path: str,
        body: bytes,
        *,
        status: int = 200,
        content_type: str = "application/octet-stream",
        declared_length: int | None = None,
    ) -> str:
        self.routes[path] = Route(
            body=body, status=status, content_type=content_type, declared_length=declared_length,
        )
        return self.url(path)

    def serve_binary(self, name: str, version: str, body: bytes, *, checksum: str | None = None) -> None:
        """Publish ``body`` at ``/<version>/<os>/<arch>/<name>`` for any platform."""
        self.routes[f"/{version}/*/*/{name}"] = Route(body=body)
        if checksum is not None:
            self.routes[f"/{version}/*/*/{name}.sha256"] = Route(
                body=checksum.encode(), content_type="text/plain",
            )

    def lookup(self, path: str) -> Route | None:
        route = self.routes.get(path)
        if route is not None:
            return route
        parts = path.split("/")
        if len(parts) == 5:
            wildcard = "/".join([parts[0], parts[1], "*", "*", parts[4]])
            return self.routes.get(wildcard)
        return None


@pytest.fixture
def binary_server():
    """Serve binaries and checksums on 127.0.0.1 for the duration of a test."""
    state: dict[str, BinaryServer] = {}

    class Handler(BaseHTTPRequestHandler):
        def do_GET(self):  # noqa: N802
            server = state["server"]
            server.hits[self.path] += 1
            route = server.lookup(self.path)
            if route is None:
                self.send_error(404, "File not found")
                return
            self.send_response(route.status)
            self.send_header("Content-Type", route.content_type)
            length = route.declared_length if route.declared_length is not None else len(route.body)
            self.send_header("Content-Length", str(length))
            self.end_headers()
            self.wfile.write(route.body)

        def log_message(self, format, *args):  # noqa: A002
            pass

    httpd = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    host, port = httpd.server_address[:2]
    state["server"] = BinaryServer(address=f"{host}:{port}")
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        yield state["server"]
    finally:
        httpd.shutdown()
        httpd.server_close()


@pytest.fixture
def binr_config(tmp_path: Path) -> BinrConfig:
    """A config rooted in a temporary directory instead of ~/.config."""
    return BinrConfig(base_dir=tmp_path / "config", timeout=5)


@pytest.fixture(autouse=True)
def _reset_binr_logger():
    """Undo CLI logging setup so caplog sees binr records in every test."""
    yield
    logger = logging.getLogger("binr")
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
