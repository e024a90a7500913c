"""Pathix — backend for sharing GPS maps.

Accounts (local password or Google sign-in), plan-limited map storage,
a shared theme catalog, and a small WebSocket echo endpoint.
"""

__version__ = "0.1.0"
