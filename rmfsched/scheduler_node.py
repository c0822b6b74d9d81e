"""Node that exposes a scheduler through JSON requests on the message bus."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from rmfsched.node import ApiRequest, ApiResponse, Node, declare_or_get_param

REQUESTS_TOPIC = "rmf_scheduler_api_requests"
RESPONSES_TOPIC = "rmf_scheduler_api_responses"

# Request type -> (scheduler handler, log level, log message, result is a document)
_REQUEST_HANDLERS: dict[str, tuple[str, int, str, bool]] = {
    "add": ("handle_add_schedule", logging.INFO,
            "Received Add Schedule Request.", False),
    "update": ("handle_update_schedule", logging.INFO,
               "Received Update Schedule Request.", False),
    "update_event_time": ("handle_update_event_time", logging.INFO,
                          "Received Update Event Time Request.", False),
    "update_series": ("handle_update_series", logging.INFO,
                      "Received Update Series Request.", False),
    "get": ("handle_get_schedule", logging.DEBUG,
            "Received Get Schedule Request.", True),
    "delete": ("handle_delete_schedule", logging.INFO,
               "Received Delete Schedule Request.", False),
    "pause": ("handle_pause", logging.INFO, "Received Pause Request.", False),
    "resume": ("handle_resume", logging.INFO, "Received Resume Request.", False),
    "cancel": ("handle_cancel", logging.INFO, "Received Cancel Request.", False),
    "toggle_pause": ("handle_toggle_pause", logging.INFO,
                     "Received Toggle Pause Request.", False),
}


@dataclass
class SchedulerOptions:
    """Settings the scheduler is created with; durations are in seconds."""

    tick_period: float = 5 * 60
    allow_past_events_duration: float = 5 * 60
    series_max_expandable_duration: float = 2 * 30 * 24 * 60 * 60
    expand_series_automatically: bool = True
    estimate_timeout: float = 2.0
    enable_optimization: bool = False
    optimization_window: str = ""
    optimization_window_timezone: str = "Asia/Singapore"
    enable_local_caching: bool = False
    cache_dir: str = "."
    cache_keep_last: int = 5
    dynamic_charger_map: dict[str, Any] = field(default_factory=dict)
    fixed_charger_map: dict[str, Any] = field(default_factory=dict)


# Node parameter name -> (option field, expected type)
_PARAMETERS: tuple[tuple[str, str, type], ...] = (
    ("tick_period", "tick_period", float),
    ("allow_past_events_duration", "allow_past_events_duration", float),
    ("series_max_expandable_duration", "series_max_expandable_duration", float),
    ("expand_series", "expand_series_automatically", bool),
    ("estimate_timeout", "estimate_timeout", float),
    ("enable_optimization", "enable_optimization", bool),
    ("optimization_window", "optimization_window", str),
    ("optimization_window_timezone", "optimization_window_timezone", str),
    ("enable_local_caching", "enable_local_caching", bool),
    ("cache_dir", "cache_dir", str),
    ("cache_keep_last", "cache_keep_last", int),
)


def _encode(result: Any) -> str:
    """Turn a handler result into the JSON text of a response."""
    to_json = getattr(result, "json", None)
    if callable(to_json):
        return to_json()
    if isinstance(result, str):
        return result
    return json.dumps(result)


def _invalid_request_json(exc: Exception) -> str:
    return json.dumps(
        {"success": False, "error": "FAILURE | INVALID_SCHEMA", "message": str(exc)}
    )


class SchedulerNode:
    """Owns a scheduler and answers schedule requests published on the bus."""

    def __init__(self, node: Node, scheduler: Any, options: SchedulerOptions) -> None:
        self.node = node
        self.options = options
        self._scheduler = scheduler
        self._response_publisher = node.create_publisher(RESPONSES_TOPIC)
        self._request_subscription = node.create_subscription(
            REQUESTS_TOPIC, self.schedule_request_cb
        )

    @classmethod
    def make_node(
        cls,
        node: Node,
        scheduler_factory: Callable[[SchedulerOptions], Any],
        dynamic_charger_map: dict[str, Any] | None = None,
        fixed_charger_map: dict[str, Any] | None = None,
    ) -> SchedulerNode:
        """Read the scheduler options from ``node`` and build the scheduler."""
        options = SchedulerOptions(
            dynamic_charger_map=dict(dynamic_charger_map or {}),
            fixed_charger_map=dict(fixed_charger_map or {}),
        )
        for param_name, option_name, expected_type in _PARAMETERS:
            value = declare_or_get_param(
                node, param_name, getattr(options, option_name), expected_type
            )
            setattr(options, option_name, value)

        scheduler_node = cls(node, scheduler_factory(options), options)
        node.logger.info("Scheduler node created.")
        return scheduler_node

    def schedule_request_cb(self, msg: ApiRequest) -> None:
        """Handle one request and publish the scheduler's response."""
        logger = self.node.logger
        try:
            request = json.loads(msg.json_msg)
        except ValueError as exc:
            self._response_publisher.publish(
                ApiResponse(
                    json_msg=_invalid_request_json(exc), request_id=msg.request_id
                )
            )
            return

        if not isinstance(request, dict):
            return
        if "type" not in request or "payload" not in request:
            return
        request_type = request["type"]
        payload = request["payload"]
        logger.debug("Request: %s", json.dumps(payload, indent=2))

        entry = _REQUEST_HANDLERS.get(request_type) if isinstance(
            request_type, str
        ) else None
        if entry is None:
            return
        method_name, level, message, is_document = entry
        logger.log(level, message)

        result = getattr(self._scheduler, method_name)(payload)
        if request_type == "update_series":
            logger.info("%s", result)
        json_msg = json.dumps(result) if is_document else _encode(result)

        response = ApiResponse(json_msg=json_msg, request_id=msg.request_id)
        self._response_publisher.publish(response)
        logger.debug("Response: %s", response.json_msg)

    def scheduler(self) -> Any:
        return self._scheduler