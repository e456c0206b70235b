"""Sentinel — security analysis jobs and structured reports."""

__version__ = "0.1.0"
