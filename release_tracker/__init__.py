"""Release tracker: detects new releases of tracked GitHub repositories."""

__version__ = "0.1.0"
