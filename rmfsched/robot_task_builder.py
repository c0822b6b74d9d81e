"""Builder plugin for robot tasks."""

from __future__ import annotations

from typing import Any

from rmfsched.errors import InvalidTaskSchemaError
from rmfsched.plugin import BuilderInterface
from rmfsched.slug import to_slug


class RobotTaskBuilder(BuilderInterface):
    """Builds a robot task from event details holding a request, robot and fleet."""

    def init(self, node: Any) -> None:
        """Nothing to prepare."""

    def build_task(self, event_details: dict) -> dict:
        if "request" not in event_details:
            raise InvalidTaskSchemaError("Event details doesn't contains request")
        task_details = {"request": event_details["request"]}
        for key in ("robot", "fleet"):
            value = event_details.get(key)
            if not isinstance(value, str):
                raise InvalidTaskSchemaError(
                    "Event details field %s must be a string", key
                )
            task_details[key] = to_slug(value)
        return task_details