import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.models.audit_log import AuditAction
from app.models.user import User
from app.schemas.preferences import (
    PreferencesResponse,
    PreferencesUpdate,
    PreferencesUpdateResponse,
    UserPreferences,
)
from app.schemas.user import Profile, ProfileResponse, ProfileUpdate, ProfileUpdateResponse
from app.api.deps import get_current_user
from app.services.audit_service import log_action

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["User Profile"])


@router.get("/profile", response_model=ProfileResponse)
def get_profile(current_user: User = Depends(get_current_user)):
    return ProfileResponse(user=Profile.model_validate(current_user))


@router.put("/profile", response_model=ProfileUpdateResponse)
def update_profile(
    data: ProfileUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Replace the editable profile fields; omitted optional fields are cleared."""
    current_user.full_name = data.full_name
    current_user.bio = data.bio or None
    current_user.location = data.location or None
    current_user.website = str(data.website) if data.website else None
    current_user.interests = data.interests

    log_action(db, user_id=current_user.id, action=AuditAction.UPDATE, resource_type="profile",
               resource_id=current_user.id, request=request)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Failed to update profile for user {current_user.id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update profile",
        )
    db.refresh(current_user)
    return ProfileUpdateResponse(user=Profile.model_validate(current_user))


@router.get("/settings", response_model=PreferencesResponse)
def get_settings(current_user: User = Depends(get_current_user)):
    """Stored preferences merged over the defaults."""
    return PreferencesResponse(preferences=UserPreferences.model_validate(current_user.preferences or {}))


@router.put("/settings", response_model=PreferencesUpdateResponse)
def update_settings(
    data: PreferencesUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    # Reassign so the JSON column is marked dirty
    current_user.preferences = {**(current_user.preferences or {}), **changes}
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Failed to update settings for user {current_user.id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update settings",
        )
    db.refresh(current_user)
    logger.info(f"Settings updated for user {current_user.id}: {sorted(changes)}")
    return PreferencesUpdateResponse(preferences=UserPreferences.model_validate(current_user.preferences))
