"""Collab Market: job board connecting content creators with business owners."""

__version__ = "0.1.0"
