"""Raccoon: forward GitLab webhook events to IRC channels."""

__version__ = "0.1.0"
