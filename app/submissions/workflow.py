"""
Submission review workflow.

A submission (video, note, documentation or project) is created Pending and
a reviewer moves it to Accepted or Rejected. Two read views exist:

- the owner's view: every submission of that owner, any status
- the public view: a course's submissions, Accepted only

Which moves are allowed and who may make them are hooks. Left unset, any
caller may set any status from any status, which is how the service has
always behaved.

Writes go straight to the collection, there is no batching and nothing
spans more than one record.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Set

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.database import generate_id, serialize_mongo, serialize_many
from app.core.errors import ForbiddenError, NotFoundError, ValidationError
from app.submissions.models import (
    EDITABLE_FIELDS, KIND_CONFIGS, KindConfig, SubmissionKind, SubmissionStatus,
)

logger = logging.getLogger(__name__)

TransitionTable = Dict[SubmissionStatus, Set[SubmissionStatus]]

# (actor_id, action, submission) -> allowed
AuthorizeHook = Callable[[Optional[str], str, dict], bool]

OPEN_TRANSITIONS: TransitionTable = {
    status: set(SubmissionStatus) for status in SubmissionStatus
}

# Opt-in stricter table: a decision is final, rejected work can be resubmitted
REVIEW_ONCE_TRANSITIONS: TransitionTable = {
    SubmissionStatus.PENDING: {SubmissionStatus.PENDING, SubmissionStatus.ACCEPTED, SubmissionStatus.REJECTED},
    SubmissionStatus.ACCEPTED: {SubmissionStatus.ACCEPTED},
    SubmissionStatus.REJECTED: {SubmissionStatus.REJECTED, SubmissionStatus.PENDING},
}


def allow_all(actor_id: Optional[str], action: str, submission: dict) -> bool:
    return True


class SubmissionWorkflow:
    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        kind: SubmissionKind,
        transitions: Optional[TransitionTable] = None,
        authorize: Optional[AuthorizeHook] = None,
    ):
        self.db = db
        self.config: KindConfig = KIND_CONFIGS[SubmissionKind(kind)]
        self.transitions = transitions or OPEN_TRANSITIONS
        self.authorize = authorize or allow_all

    @property
    def collection(self):
        return self.db[self.config.collection]

    def _check(self, actor_id: Optional[str], action: str, submission: dict):
        if not self.authorize(actor_id, action, submission):
            raise ForbiddenError(f"Not allowed to {action} this {self.config.kind.value}")

    def _draft(
        self,
        owner_id: Optional[str],
        course_id: Optional[str],
        title: Optional[str] = None,
        description: Optional[str] = None,
        payload: Optional[str] = None,
        extra: Optional[dict] = None,
    ) -> dict:
        if not owner_id:
            raise ValidationError("ownerId is required")
        if not course_id:
            raise ValidationError("courseId is required")

        now = datetime.utcnow()
        submission = {
            "submission_id": generate_id(self.config.id_prefix),
            "kind": self.config.kind.value,
            "owner_id": owner_id,
            "course_id": course_id,
            "title": title,
            "description": description,
            self.config.payload_field: payload,
            "status": SubmissionStatus.PENDING.value,
            "created_at": now,
            "updated_at": now,
        }
        for key, value in (extra or {}).items():
            if key in EDITABLE_FIELDS and key not in submission:
                submission[key] = value
        if self.config.versioned:
            submission["version"] = 1
        return submission

    def check_create(
        self,
        owner_id: Optional[str],
        course_id: Optional[str],
        title: Optional[str] = None,
        description: Optional[str] = None,
        actor_id: Optional[str] = None,
    ):
        """
        Validate and authorize a create without writing anything. Routes that
        push a file to the media host call this first so a refused caller
        never uploads.
        """
        self._check(actor_id, "create", self._draft(owner_id, course_id, title, description))

    async def create(
        self,
        owner_id: Optional[str],
        course_id: Optional[str],
        title: Optional[str] = None,
        description: Optional[str] = None,
        payload: Optional[str] = None,
        extra: Optional[dict] = None,
        actor_id: Optional[str] = None,
    ) -> dict:
        """
        Persist a new submission in Pending state.
        There is no duplicate check, the same title can be submitted twice.
        """
        submission = self._draft(owner_id, course_id, title, description, payload, extra)
        self._check(actor_id, "create", submission)
        await self.collection.insert_one(submission)
        logger.info("%s %s created by %s", self.config.kind.value, submission["submission_id"], owner_id)
        return serialize_mongo(submission)

    async def get(self, submission_id: str) -> dict:
        submission = await self.collection.find_one({"submission_id": submission_id})
        if not submission:
            raise NotFoundError(f"{self.config.kind.value.capitalize()} not found")
        return serialize_mongo(submission)

    async def set_status(
        self,
        submission_id: str,
        new_status: SubmissionStatus,
        actor_id: Optional[str] = None,
    ) -> dict:
        """Overwrite the moderation status, subject to the transition table"""
        new_status = SubmissionStatus(new_status)
        submission = await self.get(submission_id)
        self._check(actor_id, "review", submission)

        current = SubmissionStatus(submission["status"])
        if new_status not in self.transitions.get(current, set()):
            raise ValidationError(f"Cannot move from {current.value} to {new_status.value}")

        updates = {"status": new_status.value, "updated_at": datetime.utcnow()}
        await self.collection.update_one({"submission_id": submission_id}, {"$set": updates})
        submission.update(updates)
        logger.info(
            "%s %s: %s -> %s (by %s)",
            self.config.kind.value, submission_id, current.value, new_status.value, actor_id or "anonymous",
        )
        return submission

    async def list_by_owner(self, owner_id: str) -> List[dict]:
        """Every submission of one owner, any status, in stored order"""
        cursor = self.collection.find({"owner_id": owner_id})
        return serialize_many(await cursor.to_list(length=None))

    async def list_published(self, course_id: str) -> List[dict]:
        """Accepted submissions of one course"""
        cursor = self.collection.find({
            "course_id": course_id,
            "status": SubmissionStatus.ACCEPTED.value,
        })
        if self.config.publish_order:
            cursor = cursor.sort(self.config.publish_order, 1)
        return serialize_many(await cursor.to_list(length=None))

    async def update_content(
        self,
        submission_id: str,
        fields: dict,
        bump_version: Optional[bool] = None,
        actor_id: Optional[str] = None,
    ) -> dict:
        """
        Overwrite content fields. Versioned kinds bump `version` by one on
        every call, whether or not anything actually changed.
        """
        if bump_version is None:
            bump_version = self.config.versioned

        submission = await self.get(submission_id)
        self._check(actor_id, "edit", submission)

        updates = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS and v is not None}
        updates["updated_at"] = datetime.utcnow()
        change = {"$set": updates}
        if bump_version:
            change["$inc"] = {"version": 1}

        await self.collection.update_one({"submission_id": submission_id}, change)
        updated = await self.get(submission_id)
        logger.info("%s %s edited, version %s", self.config.kind.value, submission_id, updated.get("version"))
        return updated

