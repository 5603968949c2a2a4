import uuid

from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Date, Numeric, func, Index
from sqlalchemy.sql import text as sql_text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from .base import Base


class UserUniversal(Base):
    """
    Core account row. Every dependent table references it with
    ON DELETE CASCADE, so deleting this row removes the whole account.
    """
    __tablename__ = 'users_universal'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(Text, nullable=False, unique=True)
    user_code = Column(Text, unique=True)
    user_type = Column(Text, nullable=False, default='tutor')

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"), onupdate=func.now())

    # Relationships
    profile = relationship("UserProfile", back_populates="user", uselist=False, passive_deletes=True)
    addresses = relationship("UserAddress", back_populates="user", passive_deletes=True)
    educator = relationship("EducatorDetails", back_populates="user", uselist=False, passive_deletes=True)

    __table_args__ = (
        Index('idx_users_universal_email', 'email'),
    )


class UserProfile(Base):
    __tablename__ = 'user_profiles'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users_universal.id', ondelete='CASCADE'), nullable=False, unique=True)

    full_name = Column(Text, nullable=False)
    nick_name = Column(Text)
    headline = Column(Text)
    mobile_phone = Column(Text)
    profile_photo_url = Column(Text)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))

    user = relationship("UserUniversal", back_populates="profile")


class UserAddress(Base):
    __tablename__ = 'user_addresses'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users_universal.id', ondelete='CASCADE'), nullable=False)

    address_type = Column(Text, default='domicile')  # domicile|identity
    street_address = Column(Text)
    city = Column(Text)
    province = Column(Text)
    postal_code = Column(Text)
    latitude = Column(Numeric(9, 6))
    longitude = Column(Numeric(9, 6))

    user = relationship("UserUniversal", back_populates="addresses")

    __table_args__ = (
        Index('idx_user_addresses_user', 'user_id'),
    )


class UserDemographics(Base):
    __tablename__ = 'user_demographics'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users_universal.id', ondelete='CASCADE'), nullable=False, unique=True)

    birth_date = Column(Date)
    gender = Column(Text)
    religion = Column(Text)
