"""Soundcheck - music news assistant with retrieval-grounded answers."""

__version__ = "0.1.0"
