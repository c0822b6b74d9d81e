"""Execution plugin interface and the observers it notifies."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import deque
from typing import Any

from rmfsched.plugin import TaskPluginBase


class ExecutionObserverBase(ABC):
    """Receives progress and completion of executed tasks."""

    @abstractmethod
    def completion_callback(self, id: str, success: bool, detail: str = "") -> None:
        """Called once task ``id`` has finished."""

    @abstractmethod
    def update(self, id: str, remaining_time: int) -> None:
        """Called with the estimated remaining time (ns) of task ``id``."""


class ExecutionInterface(TaskPluginBase):
    """Plugin that runs tasks and reports on them to attached observers."""

    def __init__(self) -> None:
        self._observer_lock = threading.Lock()
        self._observers: deque[ExecutionObserverBase] = deque()

    def init(self, node: Any) -> None:
        """Nothing to prepare by default."""

    @abstractmethod
    def start(self, id: str, task_details: dict) -> None: ...

    @abstractmethod
    def pause(self, id: str) -> None: ...

    @abstractmethod
    def resume(self, id: str) -> None: ...

    @abstractmethod
    def cancel(self, id: str) -> None: ...

    def _snapshot(self) -> list[ExecutionObserverBase]:
        with self._observer_lock:
            return list(self._observers)

    def update(self, id: str, remaining_time: int) -> None:
        for observer in self._snapshot():
            observer.update(id, remaining_time)

    def notify_completion(self, id: str, success: bool, detail: str = "") -> None:
        for observer in self._snapshot():
            observer.completion_callback(id, success, detail)

    def attach(self, observer: ExecutionObserverBase) -> None:
        with self._observer_lock:
            self._observers.append(observer)

    def detach(self, observer: ExecutionObserverBase) -> None:
        with self._observer_lock:
            if observer in self._observers:
                self._observers.remove(observer)