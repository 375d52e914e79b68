"""
Social graph core.

This package contains:
- Result types and identifier validation
- Error taxonomy and store retry policy
- Adjacency cache
- Graph engine (follow graph operations)
- Suggestion engine (friends-of-friends recommendations)

Import the engines from their modules (``socialgraph.core.graph_engine``,
``socialgraph.core.suggestions``); the database layer depends on the
lighter modules here.
"""
