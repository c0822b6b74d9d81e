"""Nodes that load builder, estimate and runtime plugins into a scheduler."""

from __future__ import annotations

from typing import Any, ClassVar

from rmfsched.node import InvalidParameterTypeError, Node
from rmfsched.scheduler_node import SchedulerNode


def _string_list(value: Any) -> list[str] | None:
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return list(value)
    return None


class PluginNode:
    """A node whose parameters name the plugins to load into the scheduler.

    Every parameter prefix ``<name>`` is one plugin, described by
    ``<name>.type`` (the plugin type) and ``<name>.supported_tasks``
    (the task types it serves).
    """

    name_suffix: ClassVar[str] = "_plugin_client"
    kind: ClassVar[str] = "Plugin"
    load_method: ClassVar[str] = ""
    unload_method: ClassVar[str] = ""

    def __init__(self, node: Node, scheduler: Any) -> None:
        self.node = node
        self._scheduler = scheduler

    @classmethod
    def make_node(
        cls,
        scheduler_node: SchedulerNode,
        parameters: dict[str, Any] | None = None,
    ) -> PluginNode:
        """Create the node beside ``scheduler_node`` and load its plugins."""
        parent = scheduler_node.node
        node = Node(
            parent.name + cls.name_suffix,
            parent.namespace,
            bus=parent.bus,
            parameters=parameters,
        )
        plugin_node = cls(node, scheduler_node.scheduler())

        for plugin_name in node.list_parameter_prefixes():
            plugin_type = node.get_parameter(plugin_name + ".type")
            if not isinstance(plugin_type, str):
                raise InvalidParameterTypeError(
                    "Parameter '%s.type' must be a string.", plugin_name
                )
            supported_tasks = _string_list(
                node.get_parameter(plugin_name + ".supported_tasks")
            )
            if supported_tasks is None:
                raise InvalidParameterTypeError(
                    "Parameter '%s.supported_tasks' must be a list of strings.",
                    plugin_name,
                )
            node.logger.info(
                "%s plugin found: %s, type: %s", cls.kind, plugin_name, plugin_type
            )
            plugin_node.load_interface(plugin_name, plugin_type, supported_tasks)

        return plugin_node

    def load_interface(self, name: str, interface: str, task_types: list[str]) -> None:
        """Load plugin type ``interface`` under ``name`` for ``task_types``."""
        getattr(self._scheduler, self.load_method)(
            self.node, name, interface, list(task_types)
        )

    def unload_interface(self, name: str) -> None:
        """Unload the plugin called ``name``."""
        getattr(self._scheduler, self.unload_method)(name)


class BuilderNode(PluginNode):
    """Loads task builder plugins."""

    name_suffix = "_builder_client"
    kind = "Builder"
    load_method = "load_builder_interface"
    unload_method = "unload_builder_interface"


class EstimateNode(PluginNode):
    """Loads task estimate plugins."""

    name_suffix = "_estimate_client"
    kind = "Estimate"
    load_method = "load_estimate_interface"
    unload_method = "unload_estimate_interface"


class RuntimeNode(PluginNode):
    """Loads task execution plugins."""

    name_suffix = "_runtime_client"
    kind = "Execute"
    load_method = "load_runtime_interface"
    unload_method = "unload_runtime_interface"