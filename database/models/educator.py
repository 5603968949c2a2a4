import uuid

from sqlalchemy import Column, Text, Integer, TIMESTAMP, ForeignKey, Numeric, UniqueConstraint, Index
from sqlalchemy.sql import text as sql_text
from sqlalchemy.dialects.postgresql import UUID, ARRAY
from sqlalchemy.orm import relationship

from .base import Base


class EducatorDetails(Base):
    """
    Tutor-specific profile. Child tables below key on educator_details.id
    (tutor_id), not on the user id.
    """
    __tablename__ = 'educator_details'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users_universal.id', ondelete='CASCADE'), nullable=False, unique=True)

    tutor_registration_number = Column(Text, unique=True)
    academic_status = Column(Text)
    university_s1_name = Column(Text)
    experience_summary = Column(Text)  # free text, e.g. "S2 Matematika ITB, 8+ tahun mengajar"

    hourly_rate = Column(Numeric(12, 2))
    rating = Column(Numeric(3, 2))  # 0.00-5.00

    latitude = Column(Numeric(9, 6))
    longitude = Column(Numeric(9, 6))
    location_address = Column(Text)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))

    user = relationship("UserUniversal", back_populates="educator")
    program_mappings = relationship("TutorProgramMapping", back_populates="tutor", passive_deletes=True)

    __table_args__ = (
        Index('idx_educator_details_user', 'user_id'),
    )


class TutorAvailabilityConfig(Base):
    __tablename__ = 'tutor_availability_config'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tutor_id = Column(UUID(as_uuid=True), ForeignKey('educator_details.id', ondelete='CASCADE'), nullable=False)

    available_days = Column(ARRAY(Text), default=list)
    available_time_slots = Column(ARRAY(Text), default=list)
    max_students_per_week = Column(Integer)


class TutorTeachingPreferences(Base):
    __tablename__ = 'tutor_teaching_preferences'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tutor_id = Column(UUID(as_uuid=True), ForeignKey('educator_details.id', ondelete='CASCADE'), nullable=False)

    teaching_methods = Column(ARRAY(Text), default=list)
    preferred_student_levels = Column(ARRAY(Text), default=list)
    teaching_locations = Column(ARRAY(Text), default=list)


class TutorPersonalityTraits(Base):
    __tablename__ = 'tutor_personality_traits'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tutor_id = Column(UUID(as_uuid=True), ForeignKey('educator_details.id', ondelete='CASCADE'), nullable=False)

    traits = Column(ARRAY(Text), default=list)
    teaching_style = Column(Text)


class ProgramUnit(Base):
    __tablename__ = 'programs_unit'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    program_name = Column(Text, nullable=False)
    program_code = Column(Text, unique=True)


class TutorProgramMapping(Base):
    __tablename__ = 'tutor_program_mappings'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tutor_id = Column(UUID(as_uuid=True), ForeignKey('educator_details.id', ondelete='CASCADE'), nullable=False)
    program_id = Column(UUID(as_uuid=True), ForeignKey('programs_unit.id', ondelete='CASCADE'), nullable=False)

    tutor = relationship("EducatorDetails", back_populates="program_mappings")
    program = relationship("ProgramUnit")

    __table_args__ = (
        UniqueConstraint('tutor_id', 'program_id', name='uq_tutor_program'),
        Index('idx_tutor_program_mappings_tutor', 'tutor_id'),
    )


class TutorBankingInfo(Base):
    __tablename__ = 'tutor_banking_info'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tutor_id = Column(UUID(as_uuid=True), ForeignKey('educator_details.id', ondelete='CASCADE'), nullable=False)

    bank_name = Column(Text)
    account_number = Column(Text)
    account_holder_name = Column(Text)
