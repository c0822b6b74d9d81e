"""In-process messaging, nodes with parameters, and API message types."""

from __future__ import annotations

import logging
import queue
import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable

from rmfsched.errors import SchedulerError

Callback = Callable[[Any], None]

_STOP = object()


@dataclass
class ApiRequest:
    """A JSON request addressed by ``request_id``."""

    json_msg: str = ""
    request_id: str = ""


@dataclass
class ApiResponse:
    """A JSON response to the request with ``request_id``."""

    json_msg: str = ""
    request_id: str = ""


class InvalidParameterTypeError(SchedulerError, TypeError):
    """A parameter holds a value of the wrong type."""

    prefix = "InvalidParameterTypeException: "


class MessageBus:
    """Topic-based publish/subscribe within one process.

    In synchronous mode messages reach subscribers during ``publish``;
    otherwise they are queued and delivered by ``spin``.
    """

    def __init__(self, synchronous: bool = True) -> None:
        self._synchronous = synchronous
        self._subscribers: dict[str, list[Callback]] = defaultdict(list)
        self._lock = threading.Lock()
        self._queue: queue.Queue = queue.Queue()
        self._stopped = threading.Event()

    @property
    def is_shutdown(self) -> bool:
        return self._stopped.is_set()

    def subscribe(self, topic: str, callback: Callback) -> None:
        with self._lock:
            self._subscribers[topic].append(callback)

    def unsubscribe(self, topic: str, callback: Callback) -> None:
        with self._lock:
            callbacks = self._subscribers.get(topic, [])
            if callback in callbacks:
                callbacks.remove(callback)

    def publish(self, topic: str, message: Any) -> None:
        if self._synchronous:
            self._dispatch(topic, message)
        else:
            self._queue.put((topic, message))

    def _dispatch(self, topic: str, message: Any) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(topic, ()))
        for callback in callbacks:
            callback(message)

    def spin(self) -> None:
        """Deliver messages until ``shutdown`` is called."""
        if self._synchronous:
            self._stopped.wait()
            return
        while not self._stopped.is_set():
            item = self._queue.get()
            if item is _STOP:
                break
            self._dispatch(*item)

    def shutdown(self) -> None:
        self._stopped.set()
        self._queue.put(_STOP)


class Publisher:
    """Publishes messages on one topic."""

    def __init__(self, bus: MessageBus, topic: str) -> None:
        self.bus = bus
        self.topic = topic

    def publish(self, message: Any) -> None:
        self.bus.publish(self.topic, message)


@dataclass
class _Subscription:
    bus: MessageBus
    topic: str
    callback: Callback

    def close(self) -> None:
        self.bus.unsubscribe(self.topic, self.callback)


class Node:
    """A named participant on a bus, holding its own parameters."""

    def __init__(
        self,
        name: str,
        namespace: str = "/",
        *,
        bus: MessageBus | None = None,
        parameters: dict[str, Any] | None = None,
    ) -> None:
        self.name = name
        self.namespace = namespace
        self.bus = bus if bus is not None else MessageBus()
        self._parameters: dict[str, Any] = dict(parameters or {})
        self.logger = logging.getLogger(name)

    def create_publisher(self, topic: str) -> Publisher:
        return Publisher(self.bus, topic)

    def create_subscription(self, topic: str, callback: Callback) -> _Subscription:
        self.bus.subscribe(topic, callback)
        return _Subscription(self.bus, topic, callback)

    def has_parameter(self, name: str) -> bool:
        return name in self._parameters

    def get_parameter(self, name: str) -> Any:
        try:
            return self._parameters[name]
        except KeyError:
            raise KeyError(f"Parameter {name!r} is not declared") from None

    def declare_parameter(self, name: str, default: Any) -> Any:
        if name in self._parameters:
            raise ValueError(f"Parameter {name!r} has already been declared")
        self._parameters[name] = default
        return default

    def undeclare_parameter(self, name: str) -> None:
        try:
            del self._parameters[name]
        except KeyError:
            raise KeyError(f"Parameter {name!r} is not declared") from None

    def list_parameter_prefixes(self) -> list[str]:
        """Sorted prefixes of parameters named ``<prefix>.<key>``."""
        return sorted(
            {n.rsplit(".", 1)[0] for n in self._parameters if n.count(".") == 1}
        )


def _matches(value: Any, expected_type: type) -> bool:
    if expected_type is bool:
        return isinstance(value, bool)
    if isinstance(value, bool):
        return False
    return isinstance(value, expected_type)


def declare_or_get_param(
    node: Node,
    name: str,
    default: Any = None,
    expected_type: type | None = None,
) -> Any:
    """Return parameter ``name``, declaring it with ``default`` if absent.

    An integer given for a float parameter is accepted as a float.
    """
    if expected_type is None:
        if default is None:
            raise TypeError("expected_type is needed when default is None")
        expected_type = type(default)

    if node.has_parameter(name):
        value = node.get_parameter(name)
    else:
        value = node.declare_parameter(name, default)

    if not _matches(value, expected_type):
        if expected_type is float and _matches(value, int):
            value = float(value)
        else:
            node.logger.error(
                "Error getting parameter '%s', check parameter type in YAML file.",
                name,
            )
            raise InvalidParameterTypeError(
                "Error getting parameter '%s', check parameter type in YAML file.",
                name,
            )
    node.logger.info("Found parameter - %s: %s", name, value)
    return value