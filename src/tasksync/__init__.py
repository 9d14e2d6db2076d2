"""TaskSync - offline-first push/pull synchronization server."""

__version__ = "0.1.0"
