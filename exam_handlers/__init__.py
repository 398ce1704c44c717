"""Serverless HTTP handlers for the online exam platform."""

__version__ = "1.0.0"
