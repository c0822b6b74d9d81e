import pytest

from rmfsched.errors import InvalidTaskSchemaError
from rmfsched.robot_task_builder import RobotTaskBuilder
from rmfsched.slug import to_slug


@pytest.fixture
def builder():
    b = RobotTaskBuilder()
    b.init(None)
    return b


def _details():
    return {
        "request": {"category": "patrol", "description": {"places": ["a", "b"]}},
        "robot": "Robot One",
        "fleet": "Fleet-A",
    }


def test_builds_slugged_robot_and_fleet(builder):
    task = builder.build_task(_details())
    assert task["robot"] == "robot_one"
    assert task["fleet"] == "fleet_a"


def test_request_is_copied(builder):
    details = _details()
    task = builder.build_task(details)
    assert task["request"] == details["request"]
    assert set(task) == {"request", "robot", "fleet"}


def test_matches_to_slug(builder):
    details = _details()
    details["robot"] = "Big Bot-7"
    task = builder.build_task(details)
    assert task["robot"] == to_slug("Big Bot-7")


def test_missing_request_raises(builder):
    details = _details()
    del details["request"]
    with pytest.raises(InvalidTaskSchemaError) as info:
        builder.build_task(details)
    assert "Event details doesn't contains request" in str(info.value)


@pytest.mark.parametrize("key", ["robot", "fleet"])
def test_missing_robot_or_fleet_raises(builder, key):
    details = _details()
    del details[key]
    with pytest.raises(InvalidTaskSchemaError):
        builder.build_task(details)


def test_non_string_robot_raises(builder):
    details = _details()
    details["robot"] = 5
    with pytest.raises(InvalidTaskSchemaError):
        builder.build_task(details)