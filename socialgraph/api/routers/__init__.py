"""
API route handlers.
"""

from socialgraph.api.routers import graph, suggestions, users, system

__all__ = ["graph", "suggestions", "users", "system"]
