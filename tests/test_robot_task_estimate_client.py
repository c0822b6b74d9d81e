import json

import pytest

from rmfsched.errors import InvalidTaskSchemaError
from rmfsched.estimate import EstimateRequest, EstimateState
from rmfsched.node import ApiResponse, MessageBus, Node
from rmfsched.robot_task_estimate_client import (
    REQUESTS_TOPIC,
    RESPONSES_TOPIC,
    RobotTaskEstimateClient,
)


@pytest.fixture
def setup():
    bus = MessageBus()
    node = Node("estimator", bus=bus)
    sent = []
    bus.subscribe(REQUESTS_TOPIC, sent.append)
    client = RobotTaskEstimateClient()
    client.init(node)
    return client, bus, sent


def _details():
    return {
        "request": {"category": "patrol", "description": {"places": ["a"]}},
        "robot": "Robot One",
        "fleet": "fleet_a",
    }


def _reply(bus, request_id, body):
    bus.publish(RESPONSES_TOPIC, ApiResponse(json_msg=body, request_id=request_id))


def _good_body():
    return json.dumps(
        {
            "deployment_time": 3,
            "finish_time": 10,
            "duration": 7,
            "state": {"waypoint": 4, "orientation": 1.5, "battery_soc": 0.8},
        }
    )


def test_request_without_state(setup):
    client, _, sent = setup
    details = _details()
    client.async_estimate("t1", EstimateRequest(start_time=0, details=details))
    assert len(sent) == 1
    assert sent[0].request_id == "t1"
    payload = json.loads(sent[0].json_msg)
    assert payload["type"] == "estimate_task_request"
    assert payload["robot"] == details["robot"]
    assert payload["fleet"] == details["fleet"]
    assert payload["request"]["task_request"] == details["request"]
    assert "state" not in payload["request"]


def test_request_with_state(setup):
    client, _, sent = setup
    state = EstimateState(waypoint=2, orientation=0.25, consumables={"battery_soc": 0.5})
    client.async_estimate(
        "t2",
        EstimateRequest(start_time=7_000_000_000, details=_details(), state=state),
    )
    sent_state = json.loads(sent[0].json_msg)["request"]["state"]
    assert sent_state["waypoint"] == state.waypoint
    assert sent_state["orientation"] == state.orientation
    assert sent_state["battery_soc"] == state.consumables["battery_soc"]
    assert sent_state["time"] == 7000


def test_request_is_compact_sorted_json(setup):
    client, _, sent = setup
    client.async_estimate("t3", EstimateRequest(details=_details()))
    text = sent[0].json_msg
    assert " " not in text.replace("Robot One", "")
    keys = list(json.loads(text))
    assert keys == sorted(keys)


def test_response_resolves_future(setup):
    client, bus, _ = setup
    future = client.async_estimate("t4", EstimateRequest(details=_details()))
    assert not future.done()
    _reply(bus, "t4", _good_body())
    response = future.result(timeout=1)
    assert response.deployment_time == 3_000_000
    assert response.duration == response.finish_time - response.deployment_time
    assert response.state == EstimateState(4, 1.5, {"battery_soc": 0.8})


def test_unknown_response_is_ignored(setup):
    client, bus, _ = setup
    future = client.async_estimate("t5", EstimateRequest(details=_details()))
    _reply(bus, "other", _good_body())
    assert not future.done()


def test_invalid_json_keeps_request_pending(setup):
    client, bus, _ = setup
    future = client.async_estimate("t6", EstimateRequest(details=_details()))
    _reply(bus, "t6", "{not json")
    assert not future.done()
    _reply(bus, "t6", _good_body())
    assert future.result(timeout=1).state.waypoint == 4


def test_response_only_consumed_once(setup):
    client, bus, _ = setup
    future = client.async_estimate("t7", EstimateRequest(details=_details()))
    _reply(bus, "t7", _good_body())
    first = future.result(timeout=1)
    _reply(bus, "t7", _good_body().replace('"waypoint": 4', '"waypoint": 9'))
    assert future.result(timeout=1) == first


def test_missing_fields_set_exception(setup):
    client, bus, _ = setup
    future = client.async_estimate("t8", EstimateRequest(details=_details()))
    _reply(bus, "t8", json.dumps({"deployment_time": 1}))
    assert future.done()
    with pytest.raises(InvalidTaskSchemaError):
        future.result(timeout=1)


def test_missing_request_detail_raises(setup):
    client, _, sent = setup
    details = _details()
    del details["request"]
    with pytest.raises(KeyError):
        client.async_estimate("t9", EstimateRequest(details=details))
    assert sent == []


def test_uninitialised_client_raises():
    client = RobotTaskEstimateClient()
    with pytest.raises(RuntimeError):
        client.async_estimate("x", EstimateRequest(details=_details()))