#!/usr/bin/env python3
"""
Asana Resource Models

Pydantic models for API resources, the response envelope, and the
partial-update payloads sent on PUT/POST. Unknown response fields are
ignored so new API fields never break decoding.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class AsanaModel(BaseModel):
    """Base for decoded resources."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    gid: Optional[str] = None


# ============================================================================
# Envelope
# ============================================================================

class ErrorRecord(BaseModel):
    phrase: str = ""
    message: str = ""

    def __str__(self) -> str:
        return f"{self.message} - {self.phrase}"


class NextPage(BaseModel):
    """Continuation cursor; its presence means more pages exist."""

    offset: str = ""
    path: str = ""
    uri: str = ""


class Envelope(BaseModel):
    """Wrapper present on every response body."""

    model_config = ConfigDict(extra="ignore")

    data: Any = None
    next_page: Optional[NextPage] = None
    errors: List[ErrorRecord] = Field(default_factory=list)


# ============================================================================
# Resources
# ============================================================================

class Workspace(AsanaModel):
    name: Optional[str] = None
    is_organization: Optional[bool] = None


class User(AsanaModel):
    email: Optional[str] = None
    name: Optional[str] = None
    photo: Optional[Dict[str, Optional[str]]] = None
    workspaces: List[Workspace] = Field(default_factory=list)


class Project(AsanaModel):
    name: Optional[str] = None
    archived: Optional[bool] = None
    color: Optional[str] = None
    notes: Optional[str] = None


class Tag(AsanaModel):
    name: Optional[str] = None
    color: Optional[str] = None
    notes: Optional[str] = None


class External(BaseModel):
    """Caller-assigned identifier and opaque data attached to a resource."""

    id: Optional[str] = None
    data: Any = None


class Section(AsanaModel):
    created_at: Optional[datetime] = None
    name: Optional[str] = None
    project: Optional[Project] = None
    tags: List[Tag] = Field(default_factory=list)
    external: Optional[External] = None


class Membership(BaseModel):
    project: Optional[Project] = None
    section: Optional[Section] = None


class Heart(AsanaModel):
    """A heart (like) placed by a user."""

    user: Optional[User] = None


class EnumOption(AsanaModel):
    name: Optional[str] = None
    color: Optional[str] = None
    enabled: Optional[bool] = None


class CustomField(AsanaModel):
    name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    enum_options: List[EnumOption] = Field(default_factory=list)
    precision: Optional[int] = None
    text_value: Optional[str] = None
    number_value: Optional[float] = None
    enum_value: Optional[EnumOption] = None


class Task(AsanaModel):
    assignee: Optional[User] = None
    assignee_status: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[User] = None
    completed: Optional[bool] = None
    completed_at: Optional[datetime] = None
    custom_fields: List[CustomField] = Field(default_factory=list)
    name: Optional[str] = None
    hearts: List[Heart] = Field(default_factory=list)
    notes: Optional[str] = None
    parent: Optional["Task"] = None
    projects: List[Project] = Field(default_factory=list)
    due_on: Optional[str] = None
    due_at: Optional[str] = None
    followers: List[User] = Field(default_factory=list)
    liked: Optional[bool] = None
    num_hearts: Optional[int] = None
    hearted: Optional[bool] = None
    modified_at: Optional[datetime] = None
    num_likes: Optional[int] = None
    tags: List[Tag] = Field(default_factory=list)
    memberships: List[Membership] = Field(default_factory=list)
    external: Optional[External] = None


class Story(AsanaModel):
    created_at: Optional[datetime] = None
    created_by: Optional[User] = None
    hearts: List[Heart] = Field(default_factory=list)
    text: Optional[str] = None
    type: Optional[str] = None  # "comment" or "system"


class Resource(AsanaModel):
    name: Optional[str] = None


class Webhook(AsanaModel):
    resource: Optional[Resource] = None
    target: Optional[str] = None
    active: Optional[bool] = None


Task.model_rebuild()


# ============================================================================
# Update payloads
# ============================================================================

class UpdatePayload(BaseModel):
    """Partial update: fields left as None are not sent."""

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True, mode="json")


class TaskUpdate(UpdatePayload):
    assignee: Optional[Union[int, str]] = None
    name: Optional[str] = None
    notes: Optional[str] = None
    hearted: Optional[bool] = None
    completed: Optional[bool] = None
    completed_at: Optional[datetime] = None
    # custom field id -> value
    custom_fields: Optional[Dict[Union[int, str], Any]] = None


class SectionUpdate(UpdatePayload):
    name: Optional[str] = None


class MembershipUpdate(UpdatePayload):
    """Places a task in a project, optionally positioned or sectioned."""

    project: Optional[Union[int, str]] = None
    insert_after: Optional[Union[int, str]] = None
    insert_before: Optional[Union[int, str]] = None
    section: Optional[Union[int, str]] = None
