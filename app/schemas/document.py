from datetime import datetime

from pydantic import Field

from app.models.document import DocumentType
from app.schemas.base import CamelModel


class Chapter(CamelModel):
    id: str
    title: str
    start_index: int = Field(ge=0)


class DocumentMetadata(CamelModel):
    original_file_name: str | None = None
    extracted_at: str | None = None
    processing_time: float | None = None
    category: str | None = None


class DocumentCreate(CamelModel):
    """An uploaded document after text extraction."""
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    type: DocumentType
    file_name: str = Field(min_length=1, max_length=255)
    file_size: int = Field(ge=0)
    word_count: int = Field(ge=0)
    estimated_read_time: int = Field(ge=0)
    chapters: list[Chapter] = []
    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)


class DocumentSummary(CamelModel):
    id: str
    title: str
    type: DocumentType
    file_name: str
    file_size: int
    word_count: int
    estimated_read_time: int
    progress: float
    chapters: list[Chapter] = []
    metadata: DocumentMetadata = Field(
        default_factory=DocumentMetadata, validation_alias="doc_metadata"
    )
    created_at: datetime
    updated_at: datetime | None = None


class DocumentDetail(DocumentSummary):
    content: str


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class DocumentListResponse(CamelModel):
    documents: list[DocumentSummary]
    pagination: Pagination


class DocumentUpdate(CamelModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = Field(None, min_length=1)
    progress: float | None = Field(None, ge=0, le=100)


class DocumentProgress(CamelModel):
    id: str
    title: str
    progress: float
    updated_at: datetime | None = None


class DocumentUpdateResponse(CamelModel):
    message: str = "Document updated successfully"
    document: DocumentProgress
