"""Estimate requests, responses and the estimate plugin interface."""

from __future__ import annotations

from abc import abstractmethod
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any

from rmfsched.plugin import TaskPluginBase


@dataclass
class EstimateState:
    """Robot state at some point of a task."""

    waypoint: int = 0
    orientation: float = 0.0
    consumables: dict[str, float] = field(default_factory=dict)


@dataclass
class EstimateStates:
    """Estimated start and end states of a task."""

    start: EstimateState | None = None
    end: EstimateState | None = None


@dataclass
class EstimateRequest:
    """Ask for an estimate of a task starting at ``start_time`` (ns)."""

    start_time: int = 0
    details: dict[str, Any] = field(default_factory=dict)
    state: EstimateState | None = None


@dataclass
class EstimateResponse:
    """Estimated times (ns) and final state of a task."""

    deployment_time: int = 0
    finish_time: int = 0
    duration: int = 0
    state: EstimateState = field(default_factory=EstimateState)


class EstimateInterface(TaskPluginBase):
    """Plugin that estimates how a task will run."""

    @abstractmethod
    def async_estimate(
        self, id: str, request: EstimateRequest
    ) -> Future[EstimateResponse]:
        """Start an estimate; the future resolves to its response."""