"""
Follow graph API endpoints.

Handlers are thin: the caller id comes from the upstream auth layer,
validation and graph semantics live in GraphEngine.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from socialgraph.api.dependencies import get_current_user_id, get_graph_engine
from socialgraph.api.models.graph import (
    CallerStats,
    ConnectionItem,
    ConnectionListResponse,
    FollowResponse,
    GlobalStats,
    InteractionCreate,
    InteractionResponse,
    MutualResponse,
    Pagination,
    RelationshipResponse,
    StatsResponse,
    UserSummary,
)
from socialgraph.core.exceptions import GraphError, InvalidArgument, NotFound, Unavailable
from socialgraph.core.graph_engine import MAX_PAGE_SIZE, GraphEngine, relationship_description
from socialgraph.database.models import utcnow

router = APIRouter(prefix="/api/graph", tags=["graph"])


def to_http_error(e: GraphError) -> HTTPException:
    """Map a graph error onto the HTTP status the client should see."""
    if isinstance(e, InvalidArgument):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, NotFound):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, Unavailable):
        return HTTPException(status_code=503, detail="Service temporarily unavailable, please retry")
    return HTTPException(status_code=500, detail="Internal server error")


@router.post("/follow/{target_id}", response_model=FollowResponse)
def follow(
    target_id: str,
    caller_id: str = Depends(get_current_user_id),
    engine: GraphEngine = Depends(get_graph_engine),
):
    """Follow a user (idempotent)."""
    try:
        result = engine.follow_user(caller_id, target_id)
    except GraphError as e:
        raise to_http_error(e)
    return FollowResponse(
        is_following=result.is_following,
        follower_count=result.follower_count,
        following_count=result.following_count,
    )


@router.delete("/follow/{target_id}", response_model=FollowResponse)
def unfollow(
    target_id: str,
    caller_id: str = Depends(get_current_user_id),
    engine: GraphEngine = Depends(get_graph_engine),
):
    """Unfollow a user (no-op when not following)."""
    try:
        result = engine.unfollow_user(caller_id, target_id)
    except GraphError as e:
        raise to_http_error(e)
    return FollowResponse(
        is_following=result.is_following,
        follower_count=result.follower_count,
        following_count=result.following_count,
    )


@router.post("/interactions", response_model=InteractionResponse)
def record_interaction(
    interaction: InteractionCreate,
    caller_id: str = Depends(get_current_user_id),
    engine: GraphEngine = Depends(get_graph_engine),
):
    """Record a like/comment/message/share/mention toward a followed user."""
    try:
        recorded = engine.update_edge_weight(caller_id, interaction.target_id, interaction.interaction_type)
    except GraphError as e:
        raise to_http_error(e)
    return InteractionResponse(
        recorded=recorded,
        source_id=caller_id,
        target_id=interaction.target_id,
        interaction_type=interaction.interaction_type,
        recorded_at=utcnow(),
    )


@router.get("/relationship/{target_id}", response_model=RelationshipResponse)
def get_relationship(
    target_id: str,
    caller_id: str = Depends(get_current_user_id),
    engine: GraphEngine = Depends(get_graph_engine),
):
    """Relationship strength between the caller and another user."""
    try:
        strength = engine.get_relationship_strength(caller_id, target_id)
    except GraphError as e:
        raise to_http_error(e)
    return RelationshipResponse(
        source_id=strength.source_id,
        target_id=strength.target_id,
        is_following=strength.is_following,
        is_followed_by=strength.is_followed_by,
        is_mutual=strength.is_mutual,
        weight=round(strength.weight, 2),
        category=strength.category,
        last_interaction=strength.last_interaction,
        description=relationship_description(strength),
    )


@router.get("/mutual/{other_id}", response_model=MutualResponse)
def get_mutual(
    other_id: str,
    type: str = Query("following", pattern="^(following|followers)$"),
    caller_id: str = Depends(get_current_user_id),
    engine: GraphEngine = Depends(get_graph_engine),
):
    """Users both the caller and another user follow (or who follow both)."""
    try:
        if type == "followers":
            users = engine.get_mutual_followers(caller_id, other_id)
        else:
            users = engine.get_mutual_connections(caller_id, other_id)
    except GraphError as e:
        raise to_http_error(e)
    items = [UserSummary.model_validate(u) for u in users]
    return MutualResponse(
        type="mutual_followers" if type == "followers" else "mutual_following",
        users=items,
        count=len(items),
    )


def _connection_list(engine: GraphEngine, caller_id: str, user_id: str, limit: int, offset: int, followers: bool):
    if followers:
        entries = engine.get_followers(user_id, limit=limit, offset=offset)
        total = engine.get_followers_count(user_id)
    else:
        entries = engine.get_following(user_id, limit=limit, offset=offset)
        total = engine.get_following_count(user_id)

    status = engine.bulk_check_following(caller_id, [e.user.user_id for e in entries])
    items = [
        ConnectionItem(
            user=UserSummary.model_validate(entry.user),
            followed_at=entry.edge.created_at,
            weight=round(entry.edge.weight, 4),
            last_interaction=entry.edge.last_interaction_at,
            is_followed_by_me=status.get(entry.user.user_id, False),
        )
        for entry in entries
    ]
    return ConnectionListResponse(
        user_id=user_id,
        items=items,
        pagination=Pagination(
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + len(entries) < total,
        ),
    )


@router.get("/users/{user_id}/followers", response_model=ConnectionListResponse)
def get_followers(
    user_id: str,
    limit: int = Query(50, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    caller_id: str = Depends(get_current_user_id),
    engine: GraphEngine = Depends(get_graph_engine),
):
    """Followers of a user, most engaged first."""
    try:
        return _connection_list(engine, caller_id, user_id, limit, offset, followers=True)
    except GraphError as e:
        raise to_http_error(e)


@router.get("/users/{user_id}/following", response_model=ConnectionListResponse)
def get_following(
    user_id: str,
    limit: int = Query(50, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    caller_id: str = Depends(get_current_user_id),
    engine: GraphEngine = Depends(get_graph_engine),
):
    """Users a user follows, most engaged first."""
    try:
        return _connection_list(engine, caller_id, user_id, limit, offset, followers=False)
    except GraphError as e:
        raise to_http_error(e)


@router.get("/stats", response_model=StatsResponse)
def get_stats(
    caller_id: str = Depends(get_current_user_id),
    engine: GraphEngine = Depends(get_graph_engine),
):
    """Global graph statistics plus the caller's own counts."""
    try:
        stats = engine.get_graph_stats()
        followers = engine.get_followers_count(caller_id)
        following = engine.get_following_count(caller_id)
    except GraphError as e:
        raise to_http_error(e)
    return StatsResponse(
        global_stats=GlobalStats(
            total_users=stats.total_nodes,
            total_connections=stats.total_edges,
            avg_followers_per_user=round(stats.avg_followers_per_user, 2),
            avg_following_per_user=round(stats.avg_following_per_user, 2),
            network_density=round(stats.network_density, 4),
        ),
        user=CallerStats(
            user_id=caller_id,
            followers=followers,
            following=following,
            engagement_ratio=round(followers / following, 2) if following > 0 else float(followers),
        ),
    )
