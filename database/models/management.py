import uuid

from sqlalchemy import Column, Text, Integer, TIMESTAMP, ForeignKey, func, Index
from sqlalchemy.sql import text as sql_text
from sqlalchemy.dialects.postgresql import UUID

from .base import Base


class TutorManagement(Base):
    """
    Operational status of a tutor. Audit columns (*_by) point at the admin
    account and must be ON DELETE SET NULL, never CASCADE.
    """
    __tablename__ = 'tutor_management'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users_universal.id', ondelete='CASCADE'), nullable=False)

    status_tutor = Column(Text, nullable=False, default='registration')
    approval_level = Column(Text)

    created_by = Column(UUID(as_uuid=True), ForeignKey('users_universal.id', ondelete='SET NULL'))
    updated_by = Column(UUID(as_uuid=True), ForeignKey('users_universal.id', ondelete='SET NULL'))
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"), onupdate=func.now())

    __table_args__ = (
        Index('idx_tutor_management_user', 'user_id'),
        Index('idx_tutor_management_status', 'status_tutor'),
    )


class TutorStatusType(Base):
    __tablename__ = 'tutor_status_types'

    id = Column(Integer, primary_key=True, autoincrement=True)
    value = Column(Text, nullable=False, unique=True)
    label = Column(Text, nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))
