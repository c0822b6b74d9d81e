"""Robot task plugins, estimate and execution clients, and scheduler nodes over an in-process message bus."""

__version__ = "0.1.0"