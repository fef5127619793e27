"""Craft Gate: HTTP gateway for running game servers in containers."""

__version__ = "0.1.0"
