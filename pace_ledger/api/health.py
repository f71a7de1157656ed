"""
Health check endpoint.

Used by load balancers and monitoring to verify the service is up
and can reach its database.
"""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pace_ledger.models.base import get_db

router = APIRouter(tags=["Health"])

logger = structlog.get_logger(__name__)


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Return application health status including database connectivity.

    A failed `SELECT 1` reports the service as degraded rather than
    raising, so the load balancer gets an answer either way.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as e:
        logger.warning("health_check_database_unreachable", error=str(e))
        db_status = "unhealthy"

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "service": "pace-ledger",
        "database": db_status,
    }
