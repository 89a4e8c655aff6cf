"""
Back-office endpoints: audit trail, manual price job runs and site settings.
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from ..config.database import get_database
from ..config.settings import get_settings
from ..schemas.audit import AuditLogListResponse, AuditLogResponse, PriceJobResponse
from ..schemas.common import pagination
from ..schemas.integrations import SiteSettingsResponse, UpdateSiteSettingsRequest
from ..services import audit, pricing, site_settings
from ..utils.serializers import serialize_docs

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(tags=["Admin"])


@router.get("/audit-logs", status_code=200, response_model=AuditLogListResponse)
async def get_audit_logs(
    entity_type: Optional[str] = Query(None, description="Filter by entity type"),
    entity_id: Optional[str] = Query(None, description="Filter by entity ID"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    db=Depends(get_database)
):
    """Audit entries, newest first"""
    try:
        logs, total = await audit.get_audit_logs(db, limit, offset, entity_type=entity_type, entity_id=entity_id)
        return AuditLogListResponse(
            logs=[AuditLogResponse(**log) for log in serialize_docs(logs)],
            pagination=pagination(total, limit, offset),
        )
    except Exception as e:
        logger.error(f"Failed to fetch audit logs: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch audit logs: {str(e)}")


@router.post("/admin/scheduled-prices/apply", status_code=200, response_model=PriceJobResponse)
async def apply_scheduled_prices(db=Depends(get_database)):
    """Run the scheduled price job now"""
    try:
        return await pricing.apply_scheduled_prices(db)
    except Exception as e:
        logger.error(f"Failed to apply scheduled prices: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to apply scheduled prices: {str(e)}")


@router.get("/settings", status_code=200, response_model=SiteSettingsResponse)
async def get_site_settings(db=Depends(get_database)):
    try:
        return await site_settings.get_site_settings(db)
    except Exception as e:
        logger.error(f"Failed to fetch settings: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch settings: {str(e)}")


@router.put("/settings", status_code=200, response_model=SiteSettingsResponse)
async def update_site_settings(update: UpdateSiteSettingsRequest, db=Depends(get_database)):
    try:
        values = update.model_dump(exclude_unset=True, exclude={"performed_by"})
        if not values:
            raise HTTPException(status_code=400, detail="No fields to update")
        return await site_settings.update_site_settings(db, values, update.performed_by)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update settings: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to update settings: {str(e)}")
