"""Task plugin base classes, a plugin type registry and a plugin manager."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable

from rmfsched.errors import PluginError

_log = logging.getLogger(__name__)


class TaskPluginBase(ABC):
    """Base class of every task plugin."""

    @abstractmethod
    def init(self, node: Any) -> None:
        """Prepare the plugin for use with ``node``."""


class BuilderInterface(TaskPluginBase):
    """Plugin that turns event details into task details."""

    @abstractmethod
    def build_task(self, event_details: dict) -> dict:
        """Return the task details built from ``event_details``."""


class PluginRegistry:
    """Maps plugin type names to factories that create plugin instances."""

    def __init__(self) -> None:
        self._factories: dict[str, Callable[[], TaskPluginBase]] = {}
        self._lock = threading.Lock()

    def register(self, name: str, factory: Callable[[], TaskPluginBase]) -> None:
        with self._lock:
            if name in self._factories:
                raise PluginError("Plugin type %s is already registered.", name)
            self._factories[name] = factory

    def create(self, name: str) -> TaskPluginBase:
        with self._lock:
            factory = self._factories.get(name)
        if factory is None:
            raise PluginError("Unknown plugin type %s.", name)
        return factory()

    def __contains__(self, name: object) -> bool:
        return name in self._factories


class TaskPluginManager:
    """Holds loaded plugins and which plugin serves each task type."""

    def __init__(
        self,
        registry: PluginRegistry,
        base: type[TaskPluginBase] = TaskPluginBase,
        base_plugin_name: str | None = None,
    ) -> None:
        self._registry = registry
        self._base = base
        self._base_plugin_name = base_plugin_name or base.__name__
        self._plugins: dict[str, TaskPluginBase] = {}
        self._task_plugins_lookup: dict[str, str] = {}

    def load_plugin(
        self,
        node: Any,
        name: str,
        plugin: str,
        supported_task_types: list[str],
    ) -> TaskPluginBase:
        """Create plugin type ``plugin`` under ``name`` for the given task types."""
        _log.info(
            "Loading %s plugin:\n%s [%s] ...", self._base_plugin_name, name, plugin
        )
        if not name:
            raise PluginError("New runtime interface name cannot be empty.")
        if name in self._plugins:
            raise PluginError("New runtime interface %s already exists.", name)

        instance = self._registry.create(plugin)
        if not isinstance(instance, self._base):
            raise PluginError(
                "Plugin type %s is not a %s.", plugin, self._base_plugin_name
            )

        for task_type in supported_task_types:
            owner = self._task_plugins_lookup.get(task_type)
            if owner is not None:
                raise PluginError(
                    "New plugins %s [%s] shares the same task type [%s]"
                    "with %s, please consider removing %s before adding %s.",
                    name, plugin, task_type, owner, owner, name,
                )

        instance.init(node)
        self._plugins[name] = instance
        for task_type in supported_task_types:
            self._task_plugins_lookup[task_type] = name

        listing = "".join(f"  - {t}\n" for t in supported_task_types)
        _log.info(
            "Successfully loaded %s plugin: %s.\nSupport task types:\n%s",
            self._base_plugin_name, name, listing,
        )
        return instance

    def unload_plugin(self, name: str) -> None:
        """Remove plugin ``name`` and release the task types it served."""
        if name not in self._plugins:
            raise PluginError("Plugin %s does not exist.", name)
        del self._plugins[name]
        self._task_plugins_lookup = {
            task: owner
            for task, owner in self._task_plugins_lookup.items()
            if owner != name
        }

    def get_supported_plugin(self, task_type: str) -> tuple[str, TaskPluginBase]:
        """Return ``(name, plugin)`` serving ``task_type``; KeyError if none."""
        try:
            name = self._task_plugins_lookup[task_type]
        except KeyError:
            raise KeyError(f"No plugin supports task type {task_type!r}") from None
        return name, self._plugins[name]

    def get_plugin(self, name: str) -> TaskPluginBase | None:
        return self._plugins.get(name)

    def plugins(self) -> dict[str, TaskPluginBase]:
        """Return a copy of the loaded plugins keyed by name."""
        return dict(self._plugins)

    def is_supported(self, task_type: str) -> bool:
        return task_type in self._task_plugins_lookup