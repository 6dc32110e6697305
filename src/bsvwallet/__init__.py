"""Async client for a custodial BSV wallet service."""

__version__ = "0.1.0"
