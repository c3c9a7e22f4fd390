"""Normalized facts from social-media data-export archives."""

__version__ = "0.1.0"
