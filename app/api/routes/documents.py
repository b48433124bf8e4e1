import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.timeutils import utc_now
from app.db.database import get_db
from app.models.document import Document
from app.models.audit_log import AuditAction
from app.models.user import User
from app.schemas.document import (
    DocumentCreate,
    DocumentDetail,
    DocumentProgress,
    DocumentListResponse,
    DocumentSummary,
    DocumentUpdate,
    DocumentUpdateResponse,
    Pagination,
)
from app.api.deps import get_current_user
from app.services.audit_service import log_action

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["Documents"])

_SORTABLE_COLUMNS = {
    "createdAt": Document.created_at,
    "updatedAt": Document.updated_at,
    "title": Document.title,
    "progress": Document.progress,
}


def get_owned_document(db: Session, user: User, document_id: str) -> Document:
    document = (
        db.query(Document)
        .filter(Document.id == document_id, Document.user_id == user.id)
        .first()
    )
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return document


@router.post("/", response_model=DocumentSummary, status_code=status.HTTP_201_CREATED)
def create_document(
    data: DocumentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Save a document whose text has already been extracted."""
    document = Document(
        user_id=current_user.id,
        title=data.title,
        content=data.content,
        type=data.type.value,
        file_name=data.file_name,
        file_size=data.file_size,
        word_count=data.word_count,
        estimated_read_time=data.estimated_read_time,
        chapters=[c.model_dump(by_alias=True) for c in data.chapters],
        doc_metadata=data.metadata.model_dump(by_alias=True, exclude_none=True),
    )
    db.add(document)
    db.commit()
    db.refresh(document)
    logger.info(f"Document {document.id} saved for user {current_user.id} ({data.word_count} words)")
    return document


@router.get("/", response_model=DocumentListResponse)
def list_documents(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, description="Match title or content"),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List the caller's documents, newest first by default."""
    query = db.query(Document).filter(Document.user_id == current_user.id)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Document.title.ilike(pattern), Document.content.ilike(pattern)))

    column = _SORTABLE_COLUMNS.get(sort_by)
    if column is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Cannot sort by {sort_by}")

    total = query.count()
    documents = (
        query.order_by(column.asc() if sort_order == "asc" else column.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return DocumentListResponse(
        documents=[DocumentSummary.model_validate(d) for d in documents],
        pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
    )


@router.get("/{document_id}", response_model=DocumentDetail)
def get_document(
    document_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_owned_document(db, current_user, document_id)


@router.put("/{document_id}", response_model=DocumentUpdateResponse)
def update_document(
    document_id: str,
    data: DocumentUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Edit the title or content, or set reading progress directly.

    Always bumps ``updated_at``, which counts as reading activity for streaks.
    """
    document = get_owned_document(db, current_user, document_id)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(document, field, value)
    document.updated_at = utc_now()

    log_action(db, user_id=current_user.id, action=AuditAction.UPDATE, resource_type="document",
               resource_id=document_id, details={"fields": sorted(changes)}, request=request)
    db.commit()
    db.refresh(document)
    logger.info(f"Document {document_id} updated by user {current_user.id}: {sorted(changes)}")
    return DocumentUpdateResponse(document=DocumentProgress.model_validate(document))


@router.delete("/{document_id}")
def delete_document(
    document_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a document with its reading sessions and quiz results."""
    document = get_owned_document(db, current_user, document_id)
    db.delete(document)
    log_action(db, user_id=current_user.id, action=AuditAction.DELETE, resource_type="document",
               resource_id=document_id, request=request)
    db.commit()
    return {"success": True}
