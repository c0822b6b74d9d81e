"""Basic description of a scheduled event."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Event:
    """A single event in the schedule.

    ``start_time`` and ``duration`` are in nanoseconds; ``event_details`` and
    ``task_details`` hold JSON text.
    """

    description: str = ""
    type: str = ""
    start_time: int = 0
    duration: int = 0
    id: str = ""
    series_id: str = ""
    dag_id: str = ""
    event_details: str = ""
    task_details: str = ""