"""
Database and wire schemas

Pydantic models for the two MongoDB collections and for request bodies.
Collection names are the lowercased model names:
- User -> "user" collection
- Project -> "project" collection
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field

# One open-schema item in a model's record list
Record = Dict[str, Any]


class FieldSpec(BaseModel):
    name: str
    type: str


class ModelSpec(BaseModel):
    name: str
    fields: List[FieldSpec] = Field(default_factory=list)


class ProjectTemplate(BaseModel):
    """Fixed shape returned by the template selector"""
    name: str
    description: str
    models: List[ModelSpec]


class User(BaseModel):
    """
    Users collection schema
    Collection name: "user"
    """
    email: EmailStr = Field(..., description="Email address (unique, lowercased)")
    password_hash: str = Field(..., description="bcrypt digest, never returned")
    plan: str = Field("free", description="Subscription plan")


class Project(BaseModel):
    """
    Projects collection schema
    Collection name: "project"

    `models` is the declared schema; `data` maps a model name to its
    records and is never validated against it.
    """
    name: str = Field(..., description="Project name")
    description: str = Field("", description="Project description")
    models: List[ModelSpec] = Field(default_factory=list)
    data: Dict[str, List[Record]] = Field(default_factory=dict)


class ProjectOut(Project):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CredentialsRequest(BaseModel):
    # Trimmed and lowercased by the user store before validation
    email: Optional[str] = None
    password: Optional[str] = None


class GenerateRequest(BaseModel):
    idea: Optional[str] = None
