"""Shared fixtures for the listener tests."""

import os
import socket

import pytest

# Plain-text logs keep subprocess output easy to scan
os.environ.setdefault("HEALTHPING_LOG_FORMAT", "text")


def free_port(kind: int) -> int:
    with socket.socket(socket.AF_INET, kind) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class RecordingTerminate:
    """Stands in for sys.exit so tests can observe termination"""

    def __init__(self, on_call=None):
        self.codes = []
        self._on_call = on_call

    def __call__(self, code: int) -> None:
        if self._on_call:
            self._on_call()
        self.codes.append(code)


@pytest.fixture
def terminate():
    return RecordingTerminate()


@pytest.fixture
def free_udp_port():
    return free_port(socket.SOCK_DGRAM)


@pytest.fixture
def free_tcp_port():
    return free_port(socket.SOCK_STREAM)


@pytest.fixture
def udp_client():
    client = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    client.bind(("127.0.0.1", 0))
    client.settimeout(2.0)
    yield client
    client.close()
