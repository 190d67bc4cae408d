"""Price resolution and portfolio analytics engine."""

__version__ = "0.1.0"
