from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

# ==================== ENUMS ====================

class SubmissionStatus(str, Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


class SubmissionKind(str, Enum):
    VIDEO = "video"
    NOTE = "note"
    DOCUMENTATION = "documentation"
    PROJECT = "project"

# ==================== PER-KIND SETTINGS ====================

@dataclass(frozen=True)
class KindConfig:
    kind: SubmissionKind
    collection: str
    id_prefix: str
    payload_field: str
    versioned: bool = False
    publish_order: Optional[str] = None  # sort key for the public listing
    media_resource_type: Optional[str] = None  # set when the payload is a binary upload


KIND_CONFIGS = {
    SubmissionKind.VIDEO: KindConfig(
        SubmissionKind.VIDEO, "videos", "VID", "payload_link", media_resource_type="video",
    ),
    SubmissionKind.NOTE: KindConfig(
        SubmissionKind.NOTE, "notes", "NOTE", "payload_link", media_resource_type="raw",
    ),
    SubmissionKind.DOCUMENTATION: KindConfig(
        SubmissionKind.DOCUMENTATION, "documentation", "DOC", "content",
        versioned=True, publish_order="content_id",
    ),
    SubmissionKind.PROJECT: KindConfig(
        SubmissionKind.PROJECT, "projects", "PRJ", "repo_url",
    ),
}

# Fields an author may overwrite through an edit
EDITABLE_FIELDS = {"title", "description", "payload_link", "content", "content_id", "repo_url"}

# ==================== REQUEST BODIES ====================

class _Body(BaseModel):
    class Config:
        populate_by_name = True


class StatusUpdate(_Body):
    submission_id: str = Field(..., alias="id")
    status: SubmissionStatus = Field(..., alias="Statusmsg")


class DocumentationCreate(_Body):
    owner_id: Optional[str] = Field(None, alias="userId")
    course_id: Optional[str] = Field(None, alias="courseId")
    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    content_id: Optional[int] = Field(None, alias="ContentID")
    payload_link: Optional[str] = Field(None, alias="link")


class DocumentationUpdate(_Body):
    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    content_id: Optional[int] = Field(None, alias="ContentID")
    payload_link: Optional[str] = Field(None, alias="link")


class ProjectCreate(_Body):
    owner_id: Optional[str] = Field(None, alias="userId")
    course_id: Optional[str] = Field(None, alias="courseId")
    title: Optional[str] = None
    description: Optional[str] = None
    repo_url: Optional[str] = Field(None, alias="repoUrl")
