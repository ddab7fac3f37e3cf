"""Completion and call-tip engine for CMake scripts."""

__version__ = "0.1.0"
