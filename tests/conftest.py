import socket
import threading

import pytest


class FeedServer:
    """One-shot SBS server: accepts a single client and writes ``lines``."""

    def __init__(self, lines, *, hold_open=False):
        self.lines = lines
        self.hold_open = hold_open
        self.release = threading.Event()
        self._server = socket.create_server(("127.0.0.1", 0))
        self.address = "127.0.0.1:%d" % self._server.getsockname()[1]
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self):
        try:
            client, _ = self._server.accept()
        except OSError:
            return
        with client:
            for line in self.lines:
                client.sendall((line + "\r\n").encode("ascii"))
            if self.hold_open:
                self.release.wait(timeout=10)

    def close(self):
        self.release.set()
        self._server.close()
        self._thread.join(timeout=5)


@pytest.fixture
def feed_server():
    servers = []

    def start(lines, **kwargs):
        server = FeedServer(lines, **kwargs)
        servers.append(server)
        return server

    yield start
    for server in servers:
        server.close()


@pytest.fixture
def closed_port_address():
    probe = socket.create_server(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    return f"127.0.0.1:{port}"


@pytest.fixture
def anyio_backend():
    return "asyncio"
