import socket
import threading

import pytest


class UdpResponder(threading.Thread):
    """Loopback responder: ``echo`` mirrors datagrams, ``silent`` drops them,
    any bytes value is sent back instead of the received payload."""

    def __init__(self, mode="echo", family=socket.AF_INET):
        super().__init__(daemon=True)
        self.mode = mode
        host = "::1" if family == socket.AF_INET6 else "127.0.0.1"
        self.sock = socket.socket(family, socket.SOCK_DGRAM)
        try:
            self.sock.settimeout(0.05)
            self.sock.bind((host, 0))
        except OSError:
            self.sock.close()
            raise
        self.address = self.sock.getsockname()[:2]
        self.received = []
        self.running = True

    def run(self):
        while self.running:
            try:
                data, peer = self.sock.recvfrom(1024)
            except socket.timeout:
                continue
            except OSError:
                return
            self.received.append((data, peer))
            if self.mode == "silent":
                continue
            reply = data if self.mode == "echo" else self.mode
            self.sock.sendto(reply, peer)

    def stop(self):
        self.running = False
        self.join(timeout=1)
        self.sock.close()


def _responder(mode, family=socket.AF_INET):
    try:
        responder = UdpResponder(mode, family)
    except OSError as exc:
        pytest.skip(f"loopback unavailable: {exc}")
    responder.start()
    return responder


@pytest.fixture
def echo_server():
    responder = _responder("echo")
    yield responder.address
    responder.stop()


@pytest.fixture
def silent_server():
    responder = _responder("silent")
    yield responder.address
    responder.stop()


@pytest.fixture
def echo6_server():
    responder = _responder("echo", socket.AF_INET6)
    yield responder.address
    responder.stop()


@pytest.fixture
def garbage_server():
    responder = _responder(b"nope")
    yield responder.address
    responder.stop()


@pytest.fixture
def responder_factory():
    started = []

    def _start(mode="echo", family=socket.AF_INET):
        responder = _responder(mode, family)
        started.append(responder)
        return responder

    yield _start
    for responder in started:
        responder.stop()
