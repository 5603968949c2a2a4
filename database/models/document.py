import uuid

from sqlalchemy import Column, Text, BigInteger, TIMESTAMP, ForeignKey, Index
from sqlalchemy.sql import text as sql_text
from sqlalchemy.dialects.postgresql import UUID

from .base import Base


class DocumentStorage(Base):
    """
    Metadata for a file held in the object store. Only the row is removed
    by the account cascade; the object itself lives under storage_key.
    """
    __tablename__ = 'document_storage'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users_universal.id', ondelete='CASCADE'), nullable=False)

    document_type = Column(Text, nullable=False)  # ktp|ijazah|cv|photo|...
    original_filename = Column(Text, nullable=False)
    mime_type = Column(Text)
    size_bytes = Column(BigInteger)
    storage_key = Column(Text, nullable=False, unique=True)

    uploaded_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))

    __table_args__ = (
        Index('idx_document_storage_user', 'user_id'),
    )
