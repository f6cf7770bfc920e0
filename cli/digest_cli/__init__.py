"""Digest CLI - edit a digest's block order from the terminal."""

__version__ = "0.1.0"
