"""SQLAlchemy models for all database tables."""

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Integer,
    String,
    Text,
    TIMESTAMP,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gazette_ingest.core.database import Base


class User(Base):
    """User who uploads gazettes and receives processing notifications."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String, nullable=False)
    full_name: Mapped[str | None] = mapped_column(String, nullable=True)
    notifications_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )


class DocumentType(Base):
    """Document classification, e.g. "Gazette Section"."""

    __tablename__ = "document_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    alternative_name: Mapped[str | None] = mapped_column(String, nullable=True)


class Document(Base):
    """A gazette or one of the sections sliced out of it.

    Sections carry either a fixed category ``name`` or an ``issue_id``, never both.
    """

    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str | None] = mapped_column(String, nullable=True)
    issue_id: Mapped[str | None] = mapped_column(String, nullable=True)
    publication_number: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    publication_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    short_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    full_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    document_type_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("document_types.id"), nullable=True
    )
    start_page: Mapped[int | None] = mapped_column(Integer, nullable=True)
    end_page: Mapped[int | None] = mapped_column(Integer, nullable=True)
    position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    publish: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    url: Mapped[str | None] = mapped_column(String, nullable=True)
    original_file: Mapped[str | None] = mapped_column(
        String, nullable=True, comment="Attachment store reference"
    )
    source_pdf_path: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()", onupdate=datetime.utcnow
    )

    document_type: Mapped["DocumentType | None"] = relationship("DocumentType")
    document_tags: Mapped[list["DocumentTag"]] = relationship(
        "DocumentTag", back_populates="document", cascade="all, delete-orphan"
    )
    issuer_document_tags: Mapped[list["IssuerDocumentTag"]] = relationship(
        "IssuerDocumentTag", back_populates="document", cascade="all, delete-orphan"
    )


class Tag(Base):
    """Tag applied to documents, either as a topic or as an issuer."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)

    alternative_names: Mapped[list["AlternativeTagName"]] = relationship(
        "AlternativeTagName", back_populates="tag", cascade="all, delete-orphan"
    )


class DocumentTag(Base):
    """General tag association."""

    __tablename__ = "document_tags"
    __table_args__ = (
        UniqueConstraint("document_id", "tag_id", name="uq_document_tags_document_tag"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False
    )
    tag_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False
    )

    document: Mapped["Document"] = relationship("Document", back_populates="document_tags")
    tag: Mapped["Tag"] = relationship("Tag")


class IssuerDocumentTag(Base):
    """Issuer attribution association."""

    __tablename__ = "issuer_document_tags"
    __table_args__ = (
        UniqueConstraint("document_id", "tag_id", name="uq_issuer_document_tags_document_tag"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False
    )
    tag_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False
    )

    document: Mapped["Document"] = relationship("Document", back_populates="issuer_document_tags")
    tag: Mapped["Tag"] = relationship("Tag")


class AlternativeTagName(Base):
    """Alternate surface form of a tag (acronyms, older names) used for text detection."""

    __tablename__ = "alternative_tag_names"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tag_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False
    )
    alternative_name: Mapped[str] = mapped_column(String, nullable=False)

    tag: Mapped["Tag"] = relationship("Tag", back_populates="alternative_names")


class ProcessingJob(Base):
    """Bookkeeping for one gazette processing job and its retries."""

    __tablename__ = "processing_jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    pdf_path: Mapped[str] = mapped_column(String, nullable=False)
    workflow_id: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default="queued", index=True
    )  # queued | running | completed | failed | dead_lettered
    final_status: Mapped[str | None] = mapped_column(
        String, nullable=True
    )  # success | warning | error
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()", onupdate=datetime.utcnow
    )
