"""
Campus social graph service package.

This package contains the follow graph core (edge store, graph engine,
suggestion engine, adjacency cache), the user directory backing store,
the HTTP API, and shared utilities.
"""

__version__ = "1.0.0"
