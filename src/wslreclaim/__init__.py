"""wslreclaim - reclaim disk space from WSL distribution images."""

__version__ = "0.1.0"
