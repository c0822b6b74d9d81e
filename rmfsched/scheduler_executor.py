"""Runs the scheduler loop alongside the message delivery of its nodes."""

from __future__ import annotations

import threading

from rmfsched.node import MessageBus, Node
from rmfsched.scheduler_node import SchedulerNode


class SchedulerExecutor:
    """Spins the buses of added nodes while the scheduler runs in a thread."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._nodes: list[Node] = []
        self._scheduler_node: SchedulerNode | None = None
        self._spinning = False

    @property
    def nodes(self) -> tuple[Node, ...]:
        with self._lock:
            return tuple(self._nodes)

    def add_node(self, node: Node) -> None:
        with self._lock:
            if node not in self._nodes:
                self._nodes.append(node)

    def add_scheduler_node(self, scheduler_node: SchedulerNode) -> None:
        """Set the node whose scheduler is run by ``spin``, and add its node."""
        with self._lock:
            self._scheduler_node = scheduler_node
        self.add_node(scheduler_node.node)

    def _buses(self) -> list[MessageBus]:
        unique: dict[int, MessageBus] = {}
        for node in self.nodes:
            unique.setdefault(id(node.bus), node.bus)
        return list(unique.values())

    def _spin_buses(self) -> None:
        buses = self._buses()
        if len(buses) == 1:
            buses[0].spin()
            return
        threads = [
            threading.Thread(target=bus.spin, name="bus-spin", daemon=True)
            for bus in buses
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

    def spin(self) -> None:
        """Block until ``shutdown``; then stop the scheduler and wait for it.

        Raises RuntimeError if already spinning or if no scheduler node was added.
        """
        with self._lock:
            if self._spinning:
                raise RuntimeError("spin() called while already spinning")
            if self._scheduler_node is None:
                raise RuntimeError("No scheduler node has been added")
            self._spinning = True
            scheduler = self._scheduler_node.scheduler()

        worker = threading.Thread(target=scheduler.spin, name="scheduler", daemon=True)
        worker.start()
        try:
            self._spin_buses()
        finally:
            scheduler.stop()
            worker.join()
            with self._lock:
                self._spinning = False

    def shutdown(self) -> None:
        """Make ``spin`` return."""
        for bus in self._buses():
            bus.shutdown()