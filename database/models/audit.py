import uuid

from sqlalchemy import Column, Text, TIMESTAMP, Index
from sqlalchemy.sql import text as sql_text
from sqlalchemy.dialects.postgresql import UUID, JSONB

from .base import Base


class UserDeletionAudit(Base):
    """
    Append-only log of completed account deletions.

    deleted_user_id has no foreign key; the row it names
    no longer exists.
    """
    __tablename__ = 'user_deletion_audit'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    deleted_user_id = Column(UUID(as_uuid=True), nullable=False)
    deleted_email = Column(Text)
    deleted_user_code = Column(Text)
    deleted_by = Column(Text, nullable=False)
    deleted_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))

    deletion_method = Column(Text, nullable=False, default='cascade_api')
    preview_source = Column(Text)  # authoritative|manual
    affected_tables = Column(JSONB, default=list)
    snapshot = Column(JSONB)

    __table_args__ = (
        Index('idx_user_deletion_audit_user', 'deleted_user_id'),
        Index('idx_user_deletion_audit_deleted_at', 'deleted_at'),
    )
