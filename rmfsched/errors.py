"""Exceptions raised by the scheduler and its task plugins."""

from __future__ import annotations


class SchedulerError(Exception):
    """Base error; the message may be a printf-style template with arguments."""

    prefix = ""

    def __init__(self, message: str = "", *args: object) -> None:
        if args:
            message = message % args
        self.message = message
        super().__init__(self.prefix + message)


class PluginError(SchedulerError):
    """A task plugin could not be loaded, found or unloaded."""

    prefix = "PluginException:\n  "


class InvalidTaskSchemaError(SchedulerError):
    """Event or task details do not follow the expected schema."""

    prefix = "InvalidTaskSchemaException:\n "


class InvalidEstimateInterfaceError(SchedulerError):
    """No usable estimate interface is available for a task."""

    prefix = "InvalidEstimateInterfaceException:\n "