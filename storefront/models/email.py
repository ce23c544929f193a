"""
Email templates and the sequence steps that reference them
"""
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text, JSON, ForeignKey
from sqlalchemy.orm import relationship

from storefront.core.database import Base, utcnow
from .user import new_id


class EmailTemplate(Base):
    __tablename__ = "email_templates"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    subject = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    variables = Column(JSON, nullable=False, default=list)
    category = Column(String(50), nullable=False, default="general")
    is_active = Column(Boolean, nullable=False, default=True)
    # "metadata" is reserved on declarative classes
    template_metadata = Column("metadata", JSON)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    sequence_steps = relationship("EmailSequenceStep", back_populates="template")


class EmailSequenceStep(Base):
    __tablename__ = "email_sequence_steps"

    id = Column(String(36), primary_key=True, default=new_id)
    template_id = Column(String(36), ForeignKey("email_templates.id"), nullable=False, index=True)
    sequence_name = Column(String(100), nullable=False)
    step_order = Column(Integer, nullable=False, default=1)
    delay_hours = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    template = relationship("EmailTemplate", back_populates="sequence_steps")
