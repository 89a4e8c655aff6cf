"""
User and activity endpoints feeding the analytics views.
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from ..config.database import get_database
from ..config.settings import get_settings
from ..schemas.analytics import (
    ActivityResponse,
    CreateUserRequest,
    TrackActivityRequest,
    UpdateUserRoleRequest,
    UserResponse,
    UsersListResponse,
)
from ..schemas.common import pagination
from ..services import users as user_service
from ..utils.serializers import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", status_code=201, response_model=UserResponse)
async def create_user(user: CreateUserRequest, db=Depends(get_database)):
    try:
        created = await user_service.create_user(db, user.model_dump())
        return UserResponse(**serialize_doc(created))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to create user: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to create user: {str(e)}")


@router.get("", status_code=200, response_model=UsersListResponse)
async def list_users(
    role: Optional[str] = Query(None, description="Filter by role"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    db=Depends(get_database)
):
    try:
        users, total = await user_service.list_users(db, role, limit, offset)
        return UsersListResponse(
            users=[UserResponse(**u) for u in serialize_docs(users)],
            pagination=pagination(total, limit, offset),
        )
    except Exception as e:
        logger.error(f"Failed to fetch users: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch users: {str(e)}")


@router.get("/{user_id}", status_code=200, response_model=UserResponse)
async def get_user(user_id: str, db=Depends(get_database)):
    try:
        user = await user_service.verify_user_exists(user_id, db)
        return UserResponse(**serialize_doc(user))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch user {user_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch user: {str(e)}")


@router.patch("/{user_id}/role", status_code=200, response_model=UserResponse)
async def update_user_role(user_id: str, update: UpdateUserRoleRequest, db=Depends(get_database)):
    try:
        updated = await user_service.update_user_role(db, user_id, update.role, update.performed_by)
        return UserResponse(**serialize_doc(updated))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update role for {user_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to update user role: {str(e)}")


@router.post("/{user_id}/activity", status_code=201, response_model=ActivityResponse)
async def track_activity(user_id: str, activity: TrackActivityRequest, db=Depends(get_database)):
    try:
        event = await user_service.track_activity(db, user_id, activity.action, activity.details)
        return ActivityResponse(**serialize_doc(event))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to track activity for {user_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to track activity: {str(e)}")
