"""
Funnel endpoints: definitions, step tracking and conversion reports.
"""
from typing import List, Optional
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from ..config.database import get_database
from ..schemas.analytics import (
    CreateFunnelRequest,
    FunnelConversion,
    FunnelDataResponse,
    FunnelResponse,
    TimeToConvertResponse,
    TrackFunnelStepRequest,
    UpdateFunnelRequest,
)
from ..schemas.common import SuccessResponse
from ..services import funnels
from ..utils.dates import to_naive_utc
from ..utils.serializers import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/funnels", tags=["Funnels"])


@router.post("", status_code=201, response_model=FunnelResponse)
async def create_funnel(funnel: CreateFunnelRequest, db=Depends(get_database)):
    try:
        created = await funnels.create_funnel(db, funnel.model_dump())
        return FunnelResponse(**serialize_doc(created))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to create funnel: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to create funnel: {str(e)}")


@router.get("", status_code=200, response_model=List[FunnelResponse])
async def get_funnels(active_only: bool = Query(False), db=Depends(get_database)):
    try:
        return serialize_docs(await funnels.get_funnels(db, active_only))
    except Exception as e:
        logger.error(f"Failed to fetch funnels: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch funnels: {str(e)}")


@router.get("/{funnel_id}", status_code=200, response_model=FunnelResponse)
async def get_funnel(funnel_id: str, db=Depends(get_database)):
    try:
        funnel = await funnels.verify_funnel_exists(funnel_id, db)
        return FunnelResponse(**serialize_doc(funnel))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch funnel {funnel_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch funnel: {str(e)}")


@router.put("/{funnel_id}", status_code=200, response_model=FunnelResponse)
async def update_funnel(funnel_id: str, update: UpdateFunnelRequest, db=Depends(get_database)):
    try:
        updates = update.model_dump(exclude_unset=True)
        if not updates:
            raise HTTPException(status_code=400, detail="No fields to update")
        updated = await funnels.update_funnel(db, funnel_id, updates)
        return FunnelResponse(**serialize_doc(updated))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update funnel {funnel_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to update funnel: {str(e)}")


@router.delete("/{funnel_id}", status_code=204)
async def delete_funnel(funnel_id: str, db=Depends(get_database)):
    try:
        await funnels.delete_funnel(db, funnel_id)
        return None
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete funnel {funnel_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to delete funnel: {str(e)}")


@router.post("/{funnel_id}/events", status_code=201, response_model=SuccessResponse)
async def track_funnel_step(funnel_id: str, event: TrackFunnelStepRequest, db=Depends(get_database)):
    """Record that a session reached a step"""
    try:
        await funnels.track_funnel_step(
            db, funnel_id, event.session_id, event.step_index, event.step_name, user_id=event.user_id
        )
        return SuccessResponse(message=f"Tracked step {event.step_index} for session {event.session_id}")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to track funnel step for {funnel_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to track funnel step: {str(e)}")


@router.get("/{funnel_id}/data", status_code=200, response_model=FunnelDataResponse)
async def get_funnel_data(
    funnel_id: str,
    start_date: Optional[datetime] = Query(None, description="Only count events from this time"),
    end_date: Optional[datetime] = Query(None, description="Only count events up to this time"),
    db=Depends(get_database)
):
    """Per-step counts, drop-off and conversion"""
    try:
        data = await funnels.get_funnel_data(db, funnel_id, to_naive_utc(start_date), to_naive_utc(end_date))
        return FunnelDataResponse(**serialize_doc(data))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch funnel data for {funnel_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch funnel data: {str(e)}")


@router.get("/{funnel_id}/conversions", status_code=200, response_model=List[FunnelConversion])
async def get_funnel_conversions(funnel_id: str, limit: int = Query(50, ge=1, le=500), db=Depends(get_database)):
    try:
        return await funnels.get_funnel_conversions(db, funnel_id, limit)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch conversions for {funnel_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch funnel conversions: {str(e)}")


@router.get("/{funnel_id}/time-to-convert", status_code=200, response_model=TimeToConvertResponse)
async def get_time_to_convert(funnel_id: str, db=Depends(get_database)):
    try:
        return await funnels.get_time_to_convert(db, funnel_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch time to convert for {funnel_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch time to convert: {str(e)}")
