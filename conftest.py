"""Shared fixtures: short socket paths, a running control plane, raw client sockets."""

import shutil
import socket
import tempfile
from pathlib import Path

import pytest

from ctlsock_control import ControlPlane


@pytest.fixture
def sock_path():
    # tmp_path can exceed the AF_UNIX path limit, so use a short temp dir.
    directory = tempfile.mkdtemp(prefix="ctl")
    yield Path(directory) / "ctl.sock"
    shutil.rmtree(directory, ignore_errors=True)


@pytest.fixture
def control_plane(sock_path):
    cp = ControlPlane(sock_path, poll_interval=0.05)
    cp.start()
    yield cp
    cp.stop()


@pytest.fixture
def dial(sock_path):
    conns = []

    def _dial(path=None):
        conn = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        conn.settimeout(5.0)
        conn.connect(str(path or sock_path))
        conns.append(conn)
        return conn

    yield _dial

    for conn in conns:
        conn.close()
