import logging
import re

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.timeutils import as_utc, utc_now
from app.db.database import get_db
from app.models.audit_log import AuditAction
from app.models.user import User
from app.schemas.stats import DataExportResponse, UserStatsResponse
from app.api.deps import get_current_user
from app.services.audit_service import log_action
from app.services.data_export import create_export, redeem_export
from app.services.stats_service import build_user_stats

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["User Data"])


@router.get("/stats", response_model=UserStatsResponse)
def get_user_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Dashboard statistics: progress, streaks, weekly goal and achievements."""
    try:
        stats = build_user_stats(db, current_user.id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Failed to fetch stats for user {current_user.id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch statistics",
        )
    return UserStatsResponse(stats=stats)


@router.post("/export-data", response_model=DataExportResponse)
def export_user_data(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Render a PDF of the caller's data behind a one-time download token."""
    export = create_export(db, current_user)
    log_action(db, user_id=current_user.id, action=AuditAction.EXPORT, resource_type="user",
               resource_id=current_user.id, request=request)
    db.commit()

    download_url = f"{str(request.base_url).rstrip('/')}/api/user/export-data?token={export.token}"
    return DataExportResponse(
        message="Data export prepared successfully",
        download_url=download_url,
        token=export.token,
        expires_at=as_utc(export.expires_at),
    )


@router.get("/export-data")
def download_user_data(
    request: Request,
    token: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Download a prepared export. Each token works once."""
    pdf = redeem_export(db, current_user, token)
    log_action(db, user_id=current_user.id, action=AuditAction.DOWNLOAD, resource_type="user",
               resource_id=current_user.id, request=request)
    db.commit()

    safe_name = re.sub(r"[^A-Za-z0-9]+", "-", current_user.full_name).strip("-") or "User"
    filename = f"ChapterFlux-Data-Export-{safe_name}-{utc_now().date().isoformat()}.pdf"
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
