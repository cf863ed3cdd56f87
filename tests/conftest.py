import socket
import threading
import time

import pytest
from PIL import Image

from zebra_printer.models import PrinterSettings


class Listener:
    """Servidor TCP local que guarda os bytes recebidos em cada conexão."""

    def __init__(self):
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.listen(8)
        self.port = self.sock.getsockname()[1]
        self.received = []
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def _run(self):
        while True:
            try:
                conn, _ = self.sock.accept()
            except OSError:
                return
            with conn:
                chunks = []
                while True:
                    data = conn.recv(65536)
                    if not data:
                        break
                    chunks.append(data)
            self.received.append(b"".join(chunks))

    def wait_for(self, count: int, timeout: float = 3.0):
        deadline = time.time() + timeout
        while len(self.received) < count and time.time() < deadline:
            time.sleep(0.01)
        return self.received

    def close(self):
        self.sock.close()


@pytest.fixture
def listener():
    srv = Listener()
    yield srv
    srv.close()


@pytest.fixture
def closed_port():
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


@pytest.fixture
def settings():
    return PrinterSettings(default_host="127.0.0.1", default_port=9100,
                           connect_timeout=1.0, probe_timeout=1.0)


@pytest.fixture
def make_png(tmp_path):
    def _make(width, height, color=255, mode="L", name="label.png"):
        path = tmp_path / name
        Image.new(mode, (width, height), color).save(path)
        return path
    return _make


class FakeSleep:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def fake_sleep():
    return FakeSleep()
