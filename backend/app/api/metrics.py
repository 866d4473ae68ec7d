"""
Prometheus metrics endpoint.

Exposes GET /metrics in Prometheus text exposition format. Registry and
grant table sizes are refreshed on each scrape; a store failure leaves
the previous values in place.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, Gauge, generate_latest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.services.permission_store import PermissionStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["metrics"])

frontend_registry_elements = Gauge(
    "frontend_registry_elements",
    "Number of registered frontend elements",
)

frontend_permission_rows = Gauge(
    "frontend_permission_rows",
    "Number of role/element grant rows",
)


@router.get("/metrics")
async def prometheus_metrics(db: AsyncSession = Depends(get_db)):
    """Expose Prometheus metrics in text format."""
    store = PermissionStore(db)
    try:
        frontend_registry_elements.set(await store.count_elements())
        frontend_permission_rows.set(await store.count_permissions())
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.warning("Metrics: could not refresh store gauges: %s", exc)

    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
