"""In-process command and event routing."""

from dataclasses import dataclass

import pytest

from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent


@dataclass
class Ping:
    value: int


@dataclass
class Pinged(DomainEvent):
    value: int


def test_command_returns_handler_result():
    bus = MessageBus()
    bus.register_command_handler(Ping, lambda command: command.value * 2)

    assert bus.handle_command(Ping(21)) == 42


def test_command_has_exactly_one_handler():
    bus = MessageBus()
    bus.register_command_handler(Ping, lambda command: None)

    with pytest.raises(ValueError):
        bus.register_command_handler(Ping, lambda command: None)
    with pytest.raises(ValueError):
        MessageBus().handle_command(Ping(1))


def test_command_errors_propagate():
    bus = MessageBus()

    def explode(command):
        raise RuntimeError("boom")

    bus.register_command_handler(Ping, explode)

    with pytest.raises(RuntimeError):
        bus.handle_command(Ping(1))


def test_failing_event_handler_does_not_stop_the_others():
    bus = MessageBus()
    received = []

    def broken(event):
        raise RuntimeError("boom")

    bus.register_event_handler(Pinged, broken)
    bus.register_event_handler(Pinged, lambda event: received.append(event.value))

    bus.publish_events([Pinged(value=1), Pinged(value=2)])

    assert received == [1, 2]


def test_event_handler_registered_once():
    bus = MessageBus()
    received = []

    def handler(event):
        received.append(event.value)

    bus.register_event_handler(Pinged, handler)
    bus.register_event_handler(Pinged, handler)
    bus.publish_events([Pinged(value=7)])

    assert received == [7]
