"""
Test Structured Logging
=======================

Usage:
    pytest test_structured_logging.py
"""

import json
import logging

import pytest

from ctlsock_control import AlreadyRunningError, ControlPlane
from ctlsock_wire.logging import (
    LogEvent,
    StructuredLogger,
    create_discard_logger,
    get_default_logger,
    set_default_logger,
)
from ctlsock_wire.logging.structured import DISCARD_LOGGER_NAME


def entries(caplog, logger_name):
    return [
        json.loads(record.getMessage())
        for record in caplog.records
        if record.name == logger_name
    ]


@pytest.fixture
def restore_default_logger():
    yield
    set_default_logger(None)


def test_json_record_fields(caplog):
    logger = StructuredLogger("test", logger_name="ctlsock.test.fields", handler=logging.NullHandler())
    caplog.set_level(logging.DEBUG, logger="ctlsock.test.fields")

    logger.info(
        event=LogEvent.CONTROL_STARTED,
        message="Command listener started.",
        metadata={'path': '/tmp/app.sock'}
    )

    [entry] = entries(caplog, "ctlsock.test.fields")
    assert entry['level'] == "INFO"
    assert entry['component'] == "test"
    assert entry['event'] == "control.started"
    assert entry['message'] == "Command listener started."
    assert entry['metadata'] == {'path': '/tmp/app.sock'}
    assert 'timestamp' in entry


def test_bound_context_is_merged(caplog):
    logger = StructuredLogger("test", logger_name="ctlsock.test.bind", handler=logging.NullHandler())
    caplog.set_level(logging.DEBUG, logger="ctlsock.test.bind")

    child = logger.bind(id=7).bind(conn=2)
    child.debug(event=LogEvent.COMMAND_RECEIVED, message="Got command.", metadata={'cmd': ['ping']})
    logger.debug(event=LogEvent.COMMAND_RECEIVED, message="Unbound.")

    bound, unbound = entries(caplog, "ctlsock.test.bind")
    assert bound['metadata'] == {'id': 7, 'conn': 2, 'cmd': ['ping']}
    assert 'metadata' not in unbound


def test_exception_details(caplog):
    logger = StructuredLogger("test", logger_name="ctlsock.test.exc", handler=logging.NullHandler())
    caplog.set_level(logging.DEBUG, logger="ctlsock.test.exc")

    logger.critical(event=LogEvent.ACCEPT_FAILED, message="boom", exc_info=OSError("bad fd"))

    [entry] = entries(caplog, "ctlsock.test.exc")
    assert entry['level'] == "CRITICAL"
    assert entry['exception'] == {'type': "OSError", 'message': "bad fd"}


def test_level_filtering(caplog):
    logger = StructuredLogger("test", logger_name="ctlsock.test.level", handler=logging.NullHandler())
    logger.set_level(logging.WARNING)

    logger.info(event=LogEvent.CONNECTION_OPENED, message="dropped")
    logger.warning(event=LogEvent.PROBE_TIMEOUT, message="kept")

    assert [e['message'] for e in entries(caplog, "ctlsock.test.level")] == ["kept"]


def test_discard_logger_emits_nothing(caplog):
    logger = create_discard_logger()
    caplog.set_level(logging.DEBUG)

    logger.critical(event=LogEvent.ACCEPT_FAILED, message="should vanish")

    assert not [r for r in caplog.records if r.name == DISCARD_LOGGER_NAME]


def test_default_logger_is_discarding(restore_default_logger):
    set_default_logger(None)
    assert get_default_logger().logger.name == DISCARD_LOGGER_NAME


def test_control_plane_uses_installed_logger(caplog, sock_path, restore_default_logger):
    logger = StructuredLogger("control", logger_name="ctlsock.test.plane", handler=logging.NullHandler())
    set_default_logger(logger)
    caplog.set_level(logging.DEBUG, logger="ctlsock.test.plane")

    cp = ControlPlane(sock_path, poll_interval=0.05)
    cp.start()
    cp.stop()

    logged = entries(caplog, "ctlsock.test.plane")
    events = [e['event'] for e in logged]
    assert "control.starting" in events
    assert "control.started" in events
    assert "control.stopped" in events
    assert all('id' in e['metadata'] for e in logged)


def test_second_instance_logs_critical(caplog, control_plane, sock_path):
    logger = StructuredLogger("control", logger_name="ctlsock.test.dup", handler=logging.NullHandler())
    caplog.set_level(logging.DEBUG, logger="ctlsock.test.dup")

    second = ControlPlane(sock_path, logger=logger)
    with pytest.raises(AlreadyRunningError):
        second.start()

    logged = entries(caplog, "ctlsock.test.dup")
    critical = [e for e in logged if e['level'] == "CRITICAL"]
    assert critical[0]['event'] == "control.already_running"
