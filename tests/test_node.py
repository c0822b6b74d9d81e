import threading

import pytest

from rmfsched.node import (
    ApiRequest,
    ApiResponse,
    InvalidParameterTypeError,
    MessageBus,
    Node,
    declare_or_get_param,
)


def test_synchronous_delivery_to_subscribers():
    bus = MessageBus()
    received = []
    bus.subscribe("/task_api_requests", received.append)
    request = ApiRequest(json_msg='{"type": "x"}', request_id="r1")
    bus.publish("/task_api_requests", request)
    bus.publish("/other", ApiRequest())
    assert received == [request]


def test_unsubscribe_stops_delivery():
    bus = MessageBus()
    received = []
    bus.subscribe("t", received.append)
    bus.unsubscribe("t", received.append)
    bus.publish("t", "hello")
    assert received == []


def test_async_bus_delivers_while_spinning():
    bus = MessageBus(synchronous=False)
    received = []
    done = threading.Event()

    def on_message(message):
        received.append(message)
        done.set()

    bus.subscribe("t", on_message)
    bus.publish("t", ApiResponse(json_msg="{}", request_id="r2"))
    assert received == []
    thread = threading.Thread(target=bus.spin)
    thread.start()
    assert done.wait(timeout=2)
    bus.shutdown()
    thread.join(timeout=2)
    assert not thread.is_alive()
    assert bus.is_shutdown
    assert received == [ApiResponse(json_msg="{}", request_id="r2")]


def test_node_publisher_and_subscription_share_bus():
    bus = MessageBus()
    talker = Node("talker", bus=bus)
    listener = Node("listener", bus=bus)
    received = []
    subscription = listener.create_subscription("chat", received.append)
    publisher = talker.create_publisher("chat")
    publisher.publish("one")
    subscription.close()
    publisher.publish("two")
    assert received == ["one"]


def test_parameters_declare_get_undeclare():
    node = Node("n", parameters={"tick_period": 60.0})
    assert node.has_parameter("tick_period")
    assert node.get_parameter("tick_period") == 60.0
    assert node.declare_parameter("cache_dir", ".") == "."
    with pytest.raises(ValueError):
        node.declare_parameter("cache_dir", "/tmp")
    node.undeclare_parameter("cache_dir")
    assert not node.has_parameter("cache_dir")
    with pytest.raises(KeyError):
        node.get_parameter("cache_dir")


def test_parameter_prefixes():
    node = Node(
        "n",
        parameters={
            "robot.type": "a",
            "robot.supported_tasks": ["x"],
            "alpha.type": "b",
            "deep.nested.key": 1,
            "flat": 2,
        },
    )
    assert node.list_parameter_prefixes() == ["alpha", "robot"]


def test_declare_or_get_param_uses_default_when_missing():
    node = Node("n")
    assert declare_or_get_param(node, "expand_series", True) is True
    assert node.get_parameter("expand_series") is True


def test_declare_or_get_param_prefers_existing_value():
    node = Node("n", parameters={"optimization_window_timezone": "UTC"})
    value = declare_or_get_param(node, "optimization_window_timezone", "Asia/Singapore")
    assert value == "UTC"


def test_integer_accepted_for_float_parameter():
    node = Node("n", parameters={"estimate_timeout": 2})
    value = declare_or_get_param(node, "estimate_timeout", 5.0)
    assert isinstance(value, float)
    assert value == 2.0


def test_wrong_type_raises():
    node = Node("n", parameters={"cache_keep_last": "five"})
    with pytest.raises(InvalidParameterTypeError, match="cache_keep_last"):
        declare_or_get_param(node, "cache_keep_last", 5)


def test_bool_not_accepted_for_int():
    node = Node("n", parameters={"cache_keep_last": True})
    with pytest.raises(InvalidParameterTypeError):
        declare_or_get_param(node, "cache_keep_last", 5, int)


def test_expected_type_required_without_default():
    with pytest.raises(TypeError):
        declare_or_get_param(Node("n"), "x")