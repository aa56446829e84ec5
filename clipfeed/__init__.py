"""ClipFeed: engagement consistency and feed ranking engine."""

__version__ = "0.1.0"
