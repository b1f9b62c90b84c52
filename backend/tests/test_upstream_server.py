import json
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
from fastapi.testclient import TestClient

from upgrade_proxy.api import app, get_upstream_config
from upgrade_proxy.config import UpstreamConfig
from upgrade_proxy.integrations.errors import UpstreamUnavailable
from upgrade_proxy.integrations.typo3_client import Typo3Client
from upgrade_proxy.proxy import VersionProxy

from conftest import LEGACY_RELEASES

SLOW_BODY = b'{"version": 12, "x": 1}'


class _UpstreamHandler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"

    def do_GET(self):
        self.server.seen_cookies.append(self.headers.get("Cookie"))
        try:
            if self.path.endswith("/slow") or "/release/" in self.path:
                self._send_slowly()
            elif self.path.endswith("/endless"):
                self._send_endless_chunks()
            elif self.path.endswith("/json/releases/ter/full"):
                self._send_json(LEGACY_RELEASES)
            else:
                self._send_json({"version": 12})
        except (BrokenPipeError, ConnectionResetError):
            pass

    def _send_json(self, payload):
        body = json.dumps(payload).encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Set-Cookie", "upstream_session=abc123; Path=/")
        self.end_headers()
        self.wfile.write(body)

    def _send_slowly(self):
        # 3 bytes every 0.5s: each read is quick, the whole body is not
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(SLOW_BODY)))
        self.end_headers()
        for i in range(0, len(SLOW_BODY), 3):
            self.wfile.write(SLOW_BODY[i:i + 3])
            self.wfile.flush()
            time.sleep(0.5)

    def _send_endless_chunks(self):
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Transfer-Encoding", "chunked")
        self.end_headers()
        for _ in range(100):
            self.wfile.write(b"1\r\n \r\n")
            self.wfile.flush()
            time.sleep(0.2)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def upstream():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _UpstreamHandler)
    server.daemon_threads = True
    server.seen_cookies = []
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


@pytest.fixture
def upstream_config(upstream):
    port = upstream.server_address[1]
    return UpstreamConfig(base_url=f"http://127.0.0.1:{port}/api/v1/", timeout_seconds=1.0)


def test_slow_body_fails_at_deadline(upstream_config):
    client = Typo3Client(upstream_config)

    started = time.monotonic()
    with pytest.raises(UpstreamUnavailable) as exc_info:
        client.get_major("slow")
    elapsed = time.monotonic() - started

    assert "Timeout of 1.0s exceeded" in str(exc_info.value)
    assert elapsed < 2.0


def test_endless_stream_fails_at_deadline(upstream_config):
    client = Typo3Client(upstream_config)

    started = time.monotonic()
    with pytest.raises(UpstreamUnavailable):
        client.get_major("endless")

    assert time.monotonic() - started < 2.0


def test_fast_response_within_deadline(upstream_config):
    assert Typo3Client(upstream_config).get_major("12") == {"version": 12}


def test_slow_release_endpoint_falls_back_to_legacy(upstream_config):
    proxy = VersionProxy(Typo3Client(upstream_config))

    started = time.monotonic()
    assert proxy.lookup_release("12", "4") == LEGACY_RELEASES["12.4"]
    assert time.monotonic() - started < 3.0


def test_requests_do_not_share_cookies(upstream, upstream_config):
    app.dependency_overrides[get_upstream_config] = lambda: upstream_config
    try:
        api_client = TestClient(app)
        first = api_client.get("/api/typo3/12")
        second = api_client.get("/api/typo3/12")
    finally:
        app.dependency_overrides.clear()

    assert first.status_code == 200
    assert second.json() == first.json() == {"version": 12}
    assert upstream.seen_cookies == [None, None]
