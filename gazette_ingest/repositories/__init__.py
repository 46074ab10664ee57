"""Repository layer modules."""

from gazette_ingest.repositories.document_repository import DocumentRepository, DocumentTypeRepository
from gazette_ingest.repositories.processing_job_repository import ProcessingJobRepository
from gazette_ingest.repositories.tag_repository import (
    AlternativeTagNameRepository,
    DocumentTagRepository,
    IssuerDocumentTagRepository,
    TagRepository,
)
from gazette_ingest.repositories.user_repository import UserRepository

__all__ = [
    "AlternativeTagNameRepository",
    "DocumentRepository",
    "DocumentTagRepository",
    "DocumentTypeRepository",
    "IssuerDocumentTagRepository",
    "ProcessingJobRepository",
    "TagRepository",
    "UserRepository",
]
