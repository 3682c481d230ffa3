"""
Test Liveness Probe
===================

Usage:
    pytest test_probe.py
"""

import json
import logging
import os
import socket
import threading
import time

import pytest

from ctlsock_control import ControlPlane, probe
from ctlsock_wire import read_frame, write_frame
from ctlsock_wire.logging import StructuredLogger


@pytest.fixture
def wedged_listener(sock_path):
    """Socket that accepts connections at the kernel level but never answers."""
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    sock.bind(str(sock_path))
    sock.listen(4)
    yield sock
    sock.close()


def test_nothing_at_path(sock_path):
    assert probe(sock_path) is None


def test_running_instance_reports_pid(control_plane, sock_path):
    assert probe(sock_path) == str(os.getpid())


def test_wedged_listener_times_out(wedged_listener, sock_path):
    started = time.monotonic()
    assert probe(sock_path, timeout=0.1) is None
    assert time.monotonic() - started < 1.0


def test_peer_that_hangs_up(sock_path):
    server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    server.bind(str(sock_path))
    server.listen(1)
    server.settimeout(5.0)

    def hang_up():
        conn, _ = server.accept()
        conn.close()

    t = threading.Thread(target=hang_up)
    t.start()
    try:
        assert probe(sock_path, timeout=1.0) is None
    finally:
        t.join(timeout=5.0)
        server.close()


def test_probe_sends_framed_pid(sock_path):
    server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    server.bind(str(sock_path))
    server.listen(1)
    server.settimeout(5.0)
    seen = []

    def answer():
        conn, _ = server.accept()
        with conn:
            conn.settimeout(5.0)
            seen.append(read_frame(conn))
            write_frame(conn, b"4242")

    t = threading.Thread(target=answer)
    t.start()
    try:
        assert probe(sock_path, timeout=1.0) == "4242"
    finally:
        t.join(timeout=5.0)
        server.close()
    assert seen == [b"pid"]


def test_start_proceeds_over_wedged_listener(wedged_listener, sock_path, dial):
    cp = ControlPlane(sock_path, probe_timeout=0.1, poll_interval=0.05)
    cp.start()
    try:
        assert cp.is_running
        conn = dial()
        write_frame(conn, b"ping")
        assert read_frame(conn) == b"pong"
    finally:
        cp.stop()


def test_slow_reply_is_cut_off_at_timeout(sock_path):
    server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    server.bind(str(sock_path))
    server.listen(1)
    server.settimeout(5.0)

    def dribble():
        conn, _ = server.accept()
        with conn:
            conn.settimeout(5.0)
            read_frame(conn)
            try:
                for byte in b"\x00\x06123456":
                    conn.sendall(bytes([byte]))
                    time.sleep(0.08)
            except OSError:
                pass

    t = threading.Thread(target=dribble)
    t.start()
    try:
        started = time.monotonic()
        assert probe(sock_path, timeout=0.1) is None
        assert time.monotonic() - started <= 0.2
    finally:
        t.join(timeout=5.0)
        server.close()


def log_entries(caplog, logger_name):
    return [
        json.loads(record.getMessage())
        for record in caplog.records
        if record.name == logger_name
    ]


def test_refused_connect_logged_at_debug(caplog, sock_path):
    logger = StructuredLogger("control", logger_name="ctlsock.test.refused", handler=logging.NullHandler())
    caplog.set_level(logging.DEBUG, logger="ctlsock.test.refused")

    assert probe(sock_path, logger=logger) is None

    [entry] = log_entries(caplog, "ctlsock.test.refused")
    assert entry['event'] == "probe.not_running"
    assert entry['level'] == "DEBUG"


def test_timeout_logged_at_warning(caplog, wedged_listener, sock_path):
    logger = StructuredLogger("control", logger_name="ctlsock.test.wedged", handler=logging.NullHandler())
    caplog.set_level(logging.DEBUG, logger="ctlsock.test.wedged")

    assert probe(sock_path, timeout=0.1, logger=logger) is None

    [entry] = log_entries(caplog, "ctlsock.test.wedged")
    assert entry['event'] == "probe.timeout"
    assert entry['level'] == "WARNING"
    assert entry['metadata']['timeout'] == 0.1
