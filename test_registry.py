"""
Test Handler Registry and Built-in Commands
===========================================

Usage:
    pytest test_registry.py
"""

import os

import pytest

from ctlsock_control import (
    BUILTIN_HANDLERS,
    Handler,
    HandlerExistsError,
    HandlerRegistry,
    builtin_registry,
)

BUILTIN_HELP = (
    "Available commands:\n"
    "\n"
    "\thelp\tshow this message\n"
    "\tpid\treturn the Unix process ID of this program\n"
    "\tping\tchecks whether the connection is working"
)


def run(registry, name, *args):
    return registry.lookup(name).run(list(args))


def test_builtins_present():
    registry = builtin_registry()
    assert registry.names() == ["help", "pid", "ping"]
    assert len(registry) == 3


def test_ping_ignores_arguments():
    registry = builtin_registry()
    assert run(registry, "ping") == "pong"
    assert run(registry, "ping", "a", "b") == "pong"


def test_pid_is_process_id():
    assert run(builtin_registry(), "pid") == str(os.getpid())


def test_help_listing_exact():
    assert run(builtin_registry(), "help") == BUILTIN_HELP


def test_help_includes_later_registrations():
    registry = builtin_registry()
    registry.register("foo", "", lambda args: "")
    assert run(registry, "help").endswith("\n\tfoo\t\n\thelp\tshow this message\n"
                                          "\tpid\treturn the Unix process ID of this program\n"
                                          "\tping\tchecks whether the connection is working")


def test_help_stable_under_registration_order():
    first = builtin_registry()
    first.register_many([
        Handler("b", "second", lambda args: ""),
        Handler("a", "first", lambda args: ""),
    ])
    first.register("c", "third", lambda args: "")

    second = builtin_registry()
    for name, description in (("c", "third"), ("a", "first"), ("b", "second")):
        second.register(name, description, lambda args: "")

    assert first.render_help() == second.render_help()
    assert first.render_help().splitlines()[2:5] == ["\ta\tfirst", "\tb\tsecond", "\tc\tthird"]


def test_lookup_is_exact_and_case_sensitive():
    registry = builtin_registry()
    assert registry.lookup("PING") is None
    assert registry.lookup("pin") is None
    assert registry.lookup("") is None
    assert "ping" in registry
    assert "PING" not in registry


def test_builtin_cannot_be_overridden():
    registry = builtin_registry()
    with pytest.raises(HandlerExistsError) as excinfo:
        registry.register("ping", "", lambda args: "gnip")
    assert excinfo.value.name == "ping"
    assert run(registry, "ping") == "pong"


def test_duplicate_in_batch_inserts_nothing():
    registry = builtin_registry()
    with pytest.raises(HandlerExistsError):
        registry.register_many([
            Handler("foo", "", lambda args: "foo"),
            Handler("foo", "", lambda args: "foo"),
        ])
    assert "foo" not in registry


def test_batch_conflicting_with_existing_inserts_nothing():
    registry = builtin_registry()
    registry.register("foo", "", lambda args: "original")
    with pytest.raises(HandlerExistsError) as excinfo:
        registry.register_many([
            Handler("bar", "", lambda args: "bar"),
            Handler("foo", "", lambda args: "replacement"),
        ])
    assert excinfo.value.name == "foo"
    assert "bar" not in registry
    assert run(registry, "foo") == "original"


def test_registries_do_not_share_state():
    first = builtin_registry()
    second = builtin_registry()
    first.register("only_here", "", lambda args: "")
    assert "only_here" not in second
    assert len(BUILTIN_HANDLERS) == 2


def test_handler_args_are_passed_through():
    registry = HandlerRegistry()
    registry.register("join", "join arguments", lambda args: "+".join(args))
    assert run(registry, "join", "bar", "baz") == "bar+baz"


def test_empty_handler_name_rejected():
    with pytest.raises(ValueError):
        Handler("", "nameless", lambda args: "")


def test_non_callable_handler_rejected():
    with pytest.raises(TypeError):
        Handler("broken", "", "not a function")


def test_describe_is_snapshot():
    registry = builtin_registry()
    snapshot = registry.describe()
    registry.register("late", "added later", lambda args: "")
    assert "late" not in snapshot
    assert registry.describe()["late"] == "added later"
