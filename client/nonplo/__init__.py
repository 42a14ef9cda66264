"""Nonplo digital employee wizard and dashboard client."""

__version__ = "0.1.0"
