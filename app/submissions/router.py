from fastapi import APIRouter, Depends, File, Form, UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional

from app.core.auth import get_actor_id
from app.core.database import generate_id, get_db
from app.core.errors import ok, ValidationError
from app.media.uploader import MediaStore, get_media_store
from app.submissions.models import (
    KIND_CONFIGS, SubmissionKind, StatusUpdate,
    DocumentationCreate, DocumentationUpdate, ProjectCreate,
)
from app.submissions.workflow import SubmissionWorkflow

router = APIRouter(tags=["Submissions"])


def get_review_policy() -> dict:
    """
    Hooks handed to every workflow: {"transitions": ..., "authorize": ...}.
    Empty means open moves and no caller checks. Override this dependency to
    plug a policy in.
    """
    return {}


def workflow(kind: SubmissionKind):
    async def dependency(
        db: AsyncIOMotorDatabase = Depends(get_db),
        policy: dict = Depends(get_review_policy),
    ) -> SubmissionWorkflow:
        return SubmissionWorkflow(db, kind, **policy)
    return dependency


async def upload_payload(media: MediaStore, kind: SubmissionKind, upload: Optional[UploadFile]) -> str:
    """Push the submitted file to the media host, every upload gets a fresh public id"""
    if upload is None:
        raise ValidationError(f"A {kind.value} file is required.")
    data = await upload.read()
    if not data:
        raise ValidationError(f"A {kind.value} file is required.")
    return await media.upload(
        data,
        upload.content_type,
        resource_type=KIND_CONFIGS[kind].media_resource_type,
        public_id=generate_id(kind.value.capitalize()),
        filename=upload.filename or kind.value,
    )

# ==================== CREATE ====================

@router.post("/auth/addVideo", status_code=201)
async def add_video(
    userId: Optional[str] = Form(None),
    courseId: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    videoLink: Optional[UploadFile] = File(None),
    actor_id: Optional[str] = Depends(get_actor_id),
    media: MediaStore = Depends(get_media_store),
    videos: SubmissionWorkflow = Depends(workflow(SubmissionKind.VIDEO)),
):
    if not userId or not courseId:
        raise ValidationError("userId and courseId are required")
    videos.check_create(userId, courseId, title, description, actor_id=actor_id)
    link = await upload_payload(media, SubmissionKind.VIDEO, videoLink)
    video = await videos.create(userId, courseId, title, description, payload=link, actor_id=actor_id)
    return ok("Video Added", video)


@router.post("/auth/addNotes", status_code=201)
async def add_notes(
    userId: Optional[str] = Form(None),
    courseId: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    noteLink: Optional[UploadFile] = File(None),
    actor_id: Optional[str] = Depends(get_actor_id),
    media: MediaStore = Depends(get_media_store),
    notes: SubmissionWorkflow = Depends(workflow(SubmissionKind.NOTE)),
):
    if not userId or not courseId:
        raise ValidationError("userId and courseId are required")
    notes.check_create(userId, courseId, title, description, actor_id=actor_id)
    link = await upload_payload(media, SubmissionKind.NOTE, noteLink)
    note = await notes.create(userId, courseId, title, description, payload=link, actor_id=actor_id)
    return ok("Notes Added", note)


@router.post("/auth/addDoc", status_code=201)
async def add_doc(
    data: DocumentationCreate,
    actor_id: Optional[str] = Depends(get_actor_id),
    docs: SubmissionWorkflow = Depends(workflow(SubmissionKind.DOCUMENTATION)),
):
    doc = await docs.create(
        data.owner_id, data.course_id, data.title, data.description,
        payload=data.content,
        extra={"content_id": data.content_id, "payload_link": data.payload_link},
        actor_id=actor_id,
    )
    return ok("Documentation Added", doc)


@router.post("/auth/addProject", status_code=201)
async def add_project(
    data: ProjectCreate,
    actor_id: Optional[str] = Depends(get_actor_id),
    projects: SubmissionWorkflow = Depends(workflow(SubmissionKind.PROJECT)),
):
    project = await projects.create(
        data.owner_id, data.course_id, data.title, data.description,
        payload=data.repo_url, actor_id=actor_id,
    )
    return ok("Project Added", project)

# ==================== EDIT ====================

@router.put("/auth/updateDoc/{submission_id}")
async def update_doc(
    submission_id: str,
    data: DocumentationUpdate,
    actor_id: Optional[str] = Depends(get_actor_id),
    docs: SubmissionWorkflow = Depends(workflow(SubmissionKind.DOCUMENTATION)),
):
    """Edit documentation content, each call bumps the version"""
    doc = await docs.update_content(submission_id, data.model_dump(exclude_none=True), actor_id=actor_id)
    return ok("Documentation Updated", doc)

# ==================== REVIEW ====================

@router.post("/UpdateStatus")
async def update_doc_status(
    data: StatusUpdate,
    actor_id: Optional[str] = Depends(get_actor_id),
    docs: SubmissionWorkflow = Depends(workflow(SubmissionKind.DOCUMENTATION)),
):
    doc = await docs.set_status(data.submission_id, data.status, actor_id=actor_id)
    return ok("Status Updated", doc)


@router.post("/UpdateStatus/video")
async def update_video_status(
    data: StatusUpdate,
    actor_id: Optional[str] = Depends(get_actor_id),
    videos: SubmissionWorkflow = Depends(workflow(SubmissionKind.VIDEO)),
):
    video = await videos.set_status(data.submission_id, data.status, actor_id=actor_id)
    return ok("Status Updated", video)


@router.post("/UpdateStatus/note")
async def update_note_status(
    data: StatusUpdate,
    actor_id: Optional[str] = Depends(get_actor_id),
    notes: SubmissionWorkflow = Depends(workflow(SubmissionKind.NOTE)),
):
    note = await notes.set_status(data.submission_id, data.status, actor_id=actor_id)
    return ok("Status Updated", note)


@router.post("/UpdateStatus/project")
async def update_project_status(
    data: StatusUpdate,
    actor_id: Optional[str] = Depends(get_actor_id),
    projects: SubmissionWorkflow = Depends(workflow(SubmissionKind.PROJECT)),
):
    project = await projects.set_status(data.submission_id, data.status, actor_id=actor_id)
    return ok("Status Updated", project)

# ==================== PUBLIC LISTINGS (Accepted only, by course) ====================

@router.get("/auth/getDoc/{course_id}")
async def get_published_docs(course_id: str, docs: SubmissionWorkflow = Depends(workflow(SubmissionKind.DOCUMENTATION))):
    return ok("Documentation", await docs.list_published(course_id))


@router.get("/auth/getVideos/{course_id}")
async def get_published_videos(course_id: str, videos: SubmissionWorkflow = Depends(workflow(SubmissionKind.VIDEO))):
    return ok("Videos", await videos.list_published(course_id))


@router.get("/auth/getNotes/{course_id}")
async def get_published_notes(course_id: str, notes: SubmissionWorkflow = Depends(workflow(SubmissionKind.NOTE))):
    return ok("Notes", await notes.list_published(course_id))


@router.get("/auth/getProjects/{course_id}")
async def get_published_projects(course_id: str, projects: SubmissionWorkflow = Depends(workflow(SubmissionKind.PROJECT))):
    return ok("Projects", await projects.list_published(course_id))

# ==================== OWNER LISTINGS (any status, by user) ====================

@router.get("/auth/getDocs/{user_id}")
async def get_own_docs(user_id: str, docs: SubmissionWorkflow = Depends(workflow(SubmissionKind.DOCUMENTATION))):
    return ok("Documentation", await docs.list_by_owner(user_id))


@router.get("/auth/getVideo/{user_id}")
async def get_own_videos(user_id: str, videos: SubmissionWorkflow = Depends(workflow(SubmissionKind.VIDEO))):
    return ok("Videos", await videos.list_by_owner(user_id))


@router.get("/auth/getNote/{user_id}")
async def get_own_notes(user_id: str, notes: SubmissionWorkflow = Depends(workflow(SubmissionKind.NOTE))):
    return ok("Notes", await notes.list_by_owner(user_id))


@router.get("/auth/getProject/{user_id}")
async def get_own_projects(user_id: str, projects: SubmissionWorkflow = Depends(workflow(SubmissionKind.PROJECT))):
    return ok("Projects", await projects.list_by_owner(user_id))
