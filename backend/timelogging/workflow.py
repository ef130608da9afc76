# backend/timelogging/workflow.py
"""
Week submission states and who may move a week between them.

    not-started --(hours > 0 committed)--> in-progress
    in-progress --(submit, validation passes, nothing unsaved)--> submitted
    submitted   --(admin unsubmit)--> in-progress

The capability checks return a decision with a reason instead of raising,
so the same rules drive both the client (disable controls) and the server
(reject the request).
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class WeekStatus(str, Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    SUBMITTED = "submitted"


class TransitionError(Exception):
    """A requested week transition is not allowed from the current state."""

    def __init__(self, message, status=None, violated_days=None):
        super().__init__(message)
        self.status = status
        self.violated_days = list(violated_days or [])


class SubmissionBlocked(TransitionError):
    """Submit refused because one or more days exceed the daily cap."""


class WeekLockedError(TransitionError):
    """Edit refused because the week has been submitted."""


@dataclass(frozen=True)
class Actor:
    """Who is acting: their own resource (if any) and whether they are an admin."""
    user_id: Optional[int] = None
    resource_id: Optional[int] = None
    is_admin: bool = False
    can_manage_resources: bool = False

    @classmethod
    def from_user(cls, user):
        from users.permissions import has_admin_capability, has_resource_management

        return cls(
            user_id=user.pk,
            resource_id=getattr(user, "resource_id", None),
            is_admin=has_admin_capability(user),
            can_manage_resources=has_resource_management(user),
        )

    def owns(self, resource_id) -> bool:
        return self.resource_id is not None and self.resource_id == resource_id


@dataclass(frozen=True)
class EditDecision:
    allowed: bool
    reason: str = ""

    def __bool__(self):
        return self.allowed


def derive_week_status(is_submitted, entries) -> WeekStatus:
    if is_submitted:
        return WeekStatus.SUBMITTED
    if any(entry.has_hours for entry in entries):
        return WeekStatus.IN_PROGRESS
    return WeekStatus.NOT_STARTED


def can_access_resource(actor: Actor, resource_owner_id) -> EditDecision:
    if actor.owns(resource_owner_id) or actor.is_admin or actor.can_manage_resources:
        return EditDecision(True)
    return EditDecision(False, "You can only log time for your own resource")


def can_edit_week(actor: Actor, resource_owner_id, status: WeekStatus) -> EditDecision:
    access = can_access_resource(actor, resource_owner_id)
    if not access:
        return access
    if status is WeekStatus.SUBMITTED:
        return EditDecision(False, "This week has been submitted and is read-only")
    return EditDecision(True)


def can_submit_week(actor: Actor, resource_owner_id, status: WeekStatus) -> EditDecision:
    access = can_access_resource(actor, resource_owner_id)
    if not access:
        return access
    if status is WeekStatus.SUBMITTED:
        return EditDecision(False, "This week has already been submitted")
    return EditDecision(True)


def can_unsubmit_week(actor: Actor, resource_owner_id, status: WeekStatus) -> EditDecision:
    if not actor.is_admin:
        return EditDecision(False, "Only administrators can unsubmit a week")
    if status is not WeekStatus.SUBMITTED:
        return EditDecision(False, "This week has not been submitted")
    return EditDecision(True)


def needs_unsubmit_confirmation(actor: Actor, resource_owner_id) -> bool:
    """Admins reopening someone else's week get asked first."""
    return not actor.owns(resource_owner_id)


class WeekStateMachine:
    """Tracks one resource's week and applies the transitions above."""

    def __init__(self, resource_id, status=WeekStatus.NOT_STARTED):
        self.resource_id = resource_id
        self.status = WeekStatus(status)

    def __repr__(self):
        return f"<WeekStateMachine resource={self.resource_id} {self.status.value}>"

    @property
    def is_locked(self) -> bool:
        return self.status is WeekStatus.SUBMITTED

    def record_hours(self, entries):
        """Implicit not-started -> in-progress once any hours are committed."""
        if self.status is WeekStatus.NOT_STARTED and any(e.has_hours for e in entries):
            self.status = WeekStatus.IN_PROGRESS
        return self.status

    def submit(self, validation, has_unsaved_changes=False):
        if self.status is WeekStatus.SUBMITTED:
            raise TransitionError("This week has already been submitted", status=self.status)
        if has_unsaved_changes:
            raise TransitionError("Save or discard your changes before submitting", status=self.status)
        if not validation.can_submit:
            raise SubmissionBlocked(
                validation.error_message,
                status=self.status,
                violated_days=validation.violated_days,
            )
        self.status = WeekStatus.SUBMITTED
        logger.info("Week for resource %s submitted", self.resource_id)
        return self.status

    def unsubmit(self, actor: Actor):
        decision = can_unsubmit_week(actor, self.resource_id, self.status)
        if not decision:
            raise TransitionError(decision.reason, status=self.status)
        self.status = WeekStatus.IN_PROGRESS
        logger.info("Week for resource %s reopened by user %s", self.resource_id, actor.user_id)
        return self.status
