"""
Test ctlsock CLI
================

Runs the CLI entry point in-process against a live control plane.

Usage:
    pytest test_cli.py
"""

import os

import pytest

from ctlsock_cli.cli import main
from ctlsock_cli.socket_client import SocketCommandClient


def test_ping(control_plane, sock_path, capsys):
    assert main(["-f", str(sock_path), "ping"]) == 0
    assert capsys.readouterr().out == "pong\n"


def test_pid(control_plane, sock_path, capsys):
    assert main(["-f", str(sock_path), "pid"]) == 0
    assert capsys.readouterr().out == f"{os.getpid()}\n"


def test_arguments_are_forwarded(control_plane, sock_path, capsys):
    control_plane.register("echo", "", lambda args: "|".join(args))
    assert main(["-f", str(sock_path), "echo", "hello", "big", "world"]) == 0
    assert capsys.readouterr().out == "hello|big|world\n"


def test_empty_reply_prints_empty_line(control_plane, sock_path, capsys):
    control_plane.register("quiet", "", lambda args: "")
    assert main(["-f", str(sock_path), "quiet"]) == 0
    assert capsys.readouterr().out == "\n"


def test_unknown_command_is_printed(control_plane, sock_path, capsys):
    assert main(["-f", str(sock_path), "xyz"]) == 0
    assert capsys.readouterr().out == "ERROR: unknown command: 'xyz'.\n"


def test_socket_path_from_config(control_plane, sock_path, tmp_path, capsys):
    config = tmp_path / "control.yaml"
    config.write_text(f'socket_path: "{sock_path}"\n')
    assert main(["--config", str(config), "ping"]) == 0
    assert capsys.readouterr().out == "pong\n"


def test_missing_config_file(tmp_path, capsys):
    assert main(["--config", str(tmp_path / "nope.yaml"), "ping"]) == 1
    assert "Config file not found" in capsys.readouterr().err


def test_connect_failure(sock_path, capsys):
    assert main(["-f", str(sock_path), "ping"]) == 1
    assert "Couldn't connect" in capsys.readouterr().err


def test_socket_path_required(capsys):
    assert main(["ping"]) == 1
    assert "usage" in capsys.readouterr().err


def test_client_raises_connection_error(sock_path):
    client = SocketCommandClient(sock_path, timeout=1.0)
    with pytest.raises(ConnectionError):
        client.send_command("ping")


def test_client_send_command(control_plane, sock_path):
    control_plane.register("add", "", lambda args: str(sum(int(a) for a in args)))
    client = SocketCommandClient(sock_path, timeout=1.0)
    assert client.send_command("add", ["1", "2", "3"]) == "6"
    assert client.send_command("ping") == "pong"
