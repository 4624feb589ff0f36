"""House engine: declarative building description → construction geometry."""

__version__ = "0.1.0"
