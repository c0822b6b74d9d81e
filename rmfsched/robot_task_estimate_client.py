"""Estimate plugin that asks the fleet task API for robot task estimates."""

from __future__ import annotations

import json
import logging
import threading
from concurrent.futures import Future
from typing import Any

from rmfsched.errors import InvalidTaskSchemaError
from rmfsched.estimate import (
    EstimateInterface,
    EstimateRequest,
    EstimateResponse,
    EstimateState,
)
from rmfsched.node import ApiRequest, ApiResponse, Node

REQUESTS_TOPIC = "/task_api_requests"
RESPONSES_TOPIC = "/task_api_responses"

_NS_PER_MS = 1_000_000

_log = logging.getLogger(__name__)


def _dump(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


class RobotTaskEstimateClient(EstimateInterface):
    """Publishes estimate requests and resolves futures from their responses."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: dict[str, Future[EstimateResponse]] = {}
        self._node: Node | None = None
        self._publisher = None
        self._subscription = None

    @property
    def _logger(self) -> logging.Logger:
        return self._node.logger if self._node is not None else _log

    def init(self, node: Node) -> None:
        self._node = node
        self._publisher = node.create_publisher(REQUESTS_TOPIC)
        self._subscription = node.create_subscription(
            RESPONSES_TOPIC, self.handle_response
        )

    def async_estimate(
        self, id: str, request: EstimateRequest
    ) -> Future[EstimateResponse]:
        if self._publisher is None:
            raise RuntimeError("RobotTaskEstimateClient has not been initialised")

        task_request: dict[str, Any] = {"task_request": request.details["request"]}
        if request.state is not None:
            task_request["state"] = {
                "waypoint": request.state.waypoint,
                "orientation": request.state.orientation,
                "battery_soc": request.state.consumables.get("battery_soc", 0.0),
                "time": request.start_time // _NS_PER_MS,
            }

        estimate_request = {
            "request": task_request,
            "type": "estimate_task_request",
            "robot": str(request.details["robot"]),
            "fleet": str(request.details["fleet"]),
        }

        future: Future[EstimateResponse] = Future()
        with self._lock:
            self._pending[id] = future

        self._publisher.publish(
            ApiRequest(json_msg=_dump(estimate_request), request_id=id)
        )
        return future

    def handle_response(self, msg: ApiResponse) -> None:
        with self._lock:
            if msg.request_id not in self._pending:
                return
            try:
                raw = json.loads(msg.json_msg)
            except ValueError as exc:
                self._logger.error(
                    "Error in response to [%s]: %s", msg.request_id, exc
                )
                return
            future = self._pending.pop(msg.request_id)

        self._logger.info("Got Response to [%s]: %s", msg.request_id, msg.json_msg)

        try:
            state = raw["state"]
            response = EstimateResponse(
                deployment_time=int(raw["deployment_time"]) * _NS_PER_MS,
                finish_time=int(raw["finish_time"]) * _NS_PER_MS,
                duration=int(raw["duration"]) * _NS_PER_MS,
                state=EstimateState(
                    waypoint=int(state["waypoint"]),
                    orientation=float(state["orientation"]),
                    consumables={"battery_soc": float(state["battery_soc"])},
                ),
            )
        except (KeyError, TypeError, ValueError) as exc:
            future.set_exception(
                InvalidTaskSchemaError(
                    "Invalid estimate response to [%s]: %s", msg.request_id, exc
                )
            )
            return
        future.set_result(response)