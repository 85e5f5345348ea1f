"""Typed results from JSON-emitting subprocesses and cold-starting HTTP model services."""

__version__ = "0.1.0"
