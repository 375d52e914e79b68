"""
Suggestion API endpoints.
"""

from fastapi import APIRouter, Depends, Query

from socialgraph.api.dependencies import get_current_user_id, get_suggestion_engine
from socialgraph.api.models.graph import UserSummary
from socialgraph.api.models.suggestion import SuggestionItem, SuggestionResponse
from socialgraph.api.routers.graph import to_http_error
from socialgraph.core.exceptions import GraphError
from socialgraph.core.suggestions import MAX_SUGGESTIONS, SuggestionEngine
from socialgraph.core.types import SuggestionFilters

router = APIRouter(prefix="/api/graph/suggestions", tags=["suggestions"])


@router.get("", response_model=SuggestionResponse)
def get_suggestions(
    limit: int = Query(20, ge=1, le=MAX_SUGGESTIONS),
    same_department: bool = Query(False),
    same_year: bool = Query(False),
    same_college: bool = Query(False),
    caller_id: str = Depends(get_current_user_id),
    engine: SuggestionEngine = Depends(get_suggestion_engine),
):
    """People-you-may-know suggestions for the caller."""
    filters = SuggestionFilters(
        same_department=same_department,
        same_year=same_year,
        same_college=same_college,
    )
    try:
        suggestions = engine.get_suggestions(caller_id, filters=filters, limit=limit)
    except GraphError as e:
        raise to_http_error(e)
    items = [
        SuggestionItem(
            user=UserSummary.model_validate(s.user),
            score=round(s.score, 2),
            mutual_connections=s.mutual_connections,
            connection_path=s.connection_path,
            reason=s.reason,
        )
        for s in suggestions
    ]
    return SuggestionResponse(user_id=caller_id, suggestions=items, n=len(items))
