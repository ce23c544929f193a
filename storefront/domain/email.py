"""
Email template schemas
"""
from datetime import datetime
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, Field, EmailStr

from .base import DomainModel


class EmailTemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9_-]+$")
    subject: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    variables: List[str] = Field(default_factory=list)
    category: str = Field("general", min_length=1, max_length=50)
    is_active: bool = True
    metadata: Optional[Dict[str, Any]] = None


class EmailTemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=100, pattern=r"^[a-z0-9_-]+$")
    subject: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1)
    variables: Optional[List[str]] = None
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    is_active: Optional[bool] = None
    metadata: Optional[Dict[str, Any]] = None


class TemplatePreview(BaseModel):
    variables: Dict[str, Any] = Field(default_factory=dict)


class TemplateSendTest(BaseModel):
    to: EmailStr
    variables: Dict[str, Any] = Field(default_factory=dict)


class EmailTemplate(DomainModel):
    id: str
    name: str
    slug: str
    subject: str
    content: str
    variables: List[str] = Field(default_factory=list)
    category: str
    is_active: bool
    template_metadata: Optional[Dict[str, Any]] = Field(None, serialization_alias="metadata")
    created_at: datetime
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['metadata'] = data.pop('template_metadata')
        return data
