"""
FastAPI dependency injection for the graph services and the caller id.
"""

from typing import Generator, Optional

from fastapi import Header, HTTPException, Request
from sqlalchemy.orm import Session

from socialgraph.core.exceptions import InvalidArgument
from socialgraph.core.graph_engine import GraphEngine
from socialgraph.core.suggestions import SuggestionEngine
from socialgraph.core.types import normalize_user_id
from socialgraph.database.connection import session_dependency
from socialgraph.services import GraphServices


def get_services(request: Request) -> GraphServices:
    """Return the services container built by create_app()."""
    return request.app.state.services


def get_db(request: Request) -> Generator[Session, None, None]:
    """Yield database session for FastAPI Depends()."""
    yield from session_dependency(get_services(request).db_manager)


def get_graph_engine(request: Request) -> GraphEngine:
    return get_services(request).graph


def get_suggestion_engine(request: Request) -> SuggestionEngine:
    return get_services(request).suggestions


def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """
    Caller id, as asserted by the upstream authentication layer.

    Authentication happens before requests reach this service; the
    gateway forwards the verified id in the X-User-Id header.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        return normalize_user_id(x_user_id)
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e))
