"""
System API endpoints (health).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from socialgraph.api.dependencies import get_db, get_services
from socialgraph.core.exceptions import Unavailable
from socialgraph.database import crud
from socialgraph.services import GraphServices

router = APIRouter(prefix="/api", tags=["system"])


@router.get("/health")
def health_check(
    db: Session = Depends(get_db),
    services: GraphServices = Depends(get_services),
):
    """Health check: database reachable and cache status."""
    cache = services.cache
    cache_info = None
    if cache is not None:
        stats = cache.stats()
        cache_info = {"hits": stats.hits, "misses": stats.misses, "size": stats.size, "ttl": stats.ttl}
    try:
        user_count = crud.get_user_count(db)
        edge_count = services.edge_store.count_all()
    except (SQLAlchemyError, Unavailable) as e:
        return {"status": "unhealthy", "database": str(e), "adjacency_cache": cache_info}
    return {
        "status": "healthy",
        "database": "connected",
        "users": user_count,
        "edges": edge_count,
        "adjacency_cache": cache_info,
    }
