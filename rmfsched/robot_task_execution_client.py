"""Execution plugin that runs robot tasks through the fleet task API."""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Any, Callable

from rmfsched.errors import InvalidTaskSchemaError
from rmfsched.execution import ExecutionInterface
from rmfsched.node import ApiRequest, ApiResponse, Node

TASK_REQUESTS_TOPIC = "/task_api_requests"
TASK_RESPONSES_TOPIC = "/task_api_responses"
PAUSE_RESUME_REQUESTS_TOPIC = "/custom_api_requests"
TASK_STATES_TOPIC = "/task_states"

# Extra time granted to an ongoing task on each status update (ns).
REMAINING_TIME_EXTENSION = 5 * 60 * 1_000_000_000

# A task silent for longer than this (ms) is considered failed.
HEALTH_TIMEOUT_MS = 10 * 1000

HEALTH_CHECK_PERIOD = 0.5

_FAILURE_STATES = frozenset({"failed", "canceled", "killed"})
_UNMONITORED_STATES = frozenset({"killed", "completed", "failed", "canceled", "queued"})

_log = logging.getLogger(__name__)


def _dump(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


@dataclass
class TaskStatus:
    """Last known state of a task, when it was reported and how long ago (ms)."""

    state: str
    last_update: float
    elapsed_ms: float = 0.0


class RobotTaskExecutionClient(ExecutionInterface):
    """Starts, pauses, resumes and cancels robot tasks and tracks their states.

    A task that stops reporting for more than ten seconds while active is
    marked as failed.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        super().__init__()
        self._clock = clock
        self._status_lock = threading.Lock()
        self._task_status: dict[str, TaskStatus] = {}
        self._node: Node | None = None
        self._task_publisher = None
        self._pause_resume_publisher = None
        self._subscription = None
        self._stop_event = threading.Event()
        self._health_thread: threading.Thread | None = None

    @property
    def _logger(self) -> logging.Logger:
        return self._node.logger if self._node is not None else _log

    def init(self, node: Node, start_health_thread: bool = True) -> None:
        self._node = node
        self._task_publisher = node.create_publisher(TASK_REQUESTS_TOPIC)
        self._pause_resume_publisher = node.create_publisher(
            PAUSE_RESUME_REQUESTS_TOPIC
        )
        self._subscription = node.create_subscription(
            TASK_STATES_TOPIC, self.handle_response
        )
        if start_health_thread:
            self._stop_event.clear()
            self._health_thread = threading.Thread(
                target=self._update_loop, name="task-health", daemon=True
            )
            self._health_thread.start()

    def _require_init(self) -> None:
        if self._task_publisher is None:
            raise RuntimeError("RobotTaskExecutionClient has not been initialised")

    def start(self, id: str, task_details: dict) -> None:
        self._require_init()
        try:
            self._logger.info("%s", task_details)
            request = task_details["request"]
            if not isinstance(request, dict):
                raise InvalidTaskSchemaError("Task request must be an object")
            task_request: dict[str, Any] = {"request": request}
            for key in ("robot", "fleet"):
                value = task_details[key]
                if not isinstance(value, str):
                    raise InvalidTaskSchemaError("Field %s must be a string", key)
                task_request[key] = value
            task_request["type"] = "robot_task_request"

            with self._status_lock:
                self._task_status[id] = TaskStatus("idle", self._clock(), 0.0)

            self._task_publisher.publish(
                ApiRequest(json_msg=_dump(task_request), request_id=id)
            )
        except (KeyError, TypeError, ValueError, InvalidTaskSchemaError) as exc:
            self._logger.error(
                "Error in start request with id: [%s]: %s", id, exc
            )

    def pause(self, id: str) -> None:
        self._require_init()
        message = {"type": "pause_task_request", "id": id}
        self._pause_resume_publisher.publish(
            ApiRequest(json_msg=_dump(message), request_id="pause_" + id)
        )

    def resume(self, id: str) -> None:
        self._require_init()
        message = {"type": "resume_task_request", "id": id}
        self._pause_resume_publisher.publish(
            ApiRequest(json_msg=_dump(message), request_id="resume_" + id)
        )

    def cancel(self, id: str) -> None:
        self._require_init()
        message = {"task_id": id, "type": "cancel_task_request"}
        self._task_publisher.publish(
            ApiRequest(json_msg=_dump(message), request_id="cancel_" + id)
        )

    def handle_response(self, response: ApiResponse) -> None:
        """Record a task state report and notify observers of its outcome."""
        try:
            data = json.loads(response.json_msg)["data"]
            task_id = data["booking"]["id"]
            status = data["status"]
            if not isinstance(task_id, str) or not isinstance(status, str):
                raise TypeError("task id and status must be strings")
        except (ValueError, KeyError, TypeError) as exc:
            self._logger.error("Error when parsing task states %s", exc)
            return

        with self._status_lock:
            entry = self._task_status.get(task_id)
            if entry is None:
                return
            entry.last_update = self._clock()
            entry.elapsed_ms = 0.0
            if status != entry.state:
                self._logger.info(
                    "Received new task status [%s] for task [%s];", status, task_id
                )
                entry.state = status

        if status == "completed":
            self._logger.info("Task [%s] is [%s];", task_id, status)
            self.notify_completion(task_id, True, "completed")
            return
        if status in _FAILURE_STATES:
            self.notify_completion(task_id, False, status)
            return
        self.update(task_id, REMAINING_TIME_EXTENSION)

    def update_health(self, now: float | None = None) -> list[str]:
        """Fail active tasks silent for too long; return the ids that failed."""
        if now is None:
            now = self._clock()
        timed_out = []
        with self._status_lock:
            for task_id, entry in self._task_status.items():
                if entry.state in _UNMONITORED_STATES:
                    continue
                elapsed = (now - entry.last_update) * 1000.0
                if elapsed > HEALTH_TIMEOUT_MS:
                    timed_out.append(task_id)
                    continue
                entry.elapsed_ms = elapsed
        for task_id in timed_out:
            with self._status_lock:
                self._task_status[task_id].state = "failed"
            self.notify_completion(task_id, False, "failed")
        return timed_out

    def task_status(self, id: str) -> TaskStatus:
        """Return a copy of the status of task ``id``; KeyError if unknown."""
        with self._status_lock:
            try:
                return replace(self._task_status[id])
            except KeyError:
                raise KeyError(f"Unknown task {id!r}") from None

    def _update_loop(self) -> None:
        while True:
            self.update_health()
            if self._stop_event.wait(HEALTH_CHECK_PERIOD):
                break

    def stop(self) -> None:
        """Stop the health monitoring thread, if running."""
        self._stop_event.set()
        thread, self._health_thread = self._health_thread, None
        if thread is not None:
            thread.join()