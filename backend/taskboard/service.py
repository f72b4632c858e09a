from __future__ import annotations

import time
from dataclasses import dataclass

from .auth import Identity, TokenIssuer, hash_password, verify_password
from .commands import AdvanceStatusCommand, CreateTaskCommand, LoginCommand, RegisterCommand, parse_id
from .errors import (
    AlreadyDone,
    EmailTaken,
    Forbidden,
    InternalError,
    InvalidCredentials,
    InvalidStatus,
    TaskNotFound,
)
from .logging_setup import get_logger
from .models import TASK_STATUSES
from .store import Store, TaskRecord, UserRecord

logger = get_logger(__name__)

# implicit advance; "done" has no successor
NEXT_STATUS = {"pending": "in_progress", "in_progress": "done"}


@dataclass(frozen=True)
class AuthResult:
    user: UserRecord
    token: str


class TaskService:
    """Registration, login and the per-user task state machine."""

    def __init__(self, store: Store, issuer: TokenIssuer, pbkdf2_iters: int):
        self.store = store
        self.issuer = issuer
        self.pbkdf2_iters = pbkdf2_iters

    def register(self, cmd: RegisterCommand) -> AuthResult:
        if self.store.email_exists(cmd.email):
            raise EmailTaken()
        try:
            pw_hash = hash_password(cmd.password, self.pbkdf2_iters)
        except (ValueError, TypeError, OverflowError) as exc:
            raise InternalError("password hashing failed") from exc
        user = self.store.create_user(cmd.name, cmd.email, pw_hash)
        logger.info("user_registered", user_id=user.id)
        return AuthResult(user=user, token=self.issuer.issue(user.id, user.email))

    def login(self, cmd: LoginCommand) -> AuthResult:
        found = self.store.get_login_candidate(cmd.email)
        # same error for unknown email and wrong password
        if found is None or not verify_password(cmd.password, found[1]):
            raise InvalidCredentials()
        user = found[0]
        return AuthResult(user=user, token=self.issuer.issue(user.id, user.email))

    def create_task(self, identity: Identity, cmd: CreateTaskCommand) -> TaskRecord:
        task = self.store.create_task(identity.id, cmd.title, cmd.description, int(time.time()))
        logger.debug("task_created", task_id=task.id, user_id=identity.id)
        return task

    def list_tasks(self, identity: Identity, requested_user_id: int | str | None) -> list[TaskRecord]:
        if parse_id(requested_user_id) != identity.id:
            raise Forbidden()
        return self.store.list_tasks(identity.id)

    def advance_status(self, identity: Identity, cmd: AdvanceStatusCommand) -> TaskRecord:
        task = self.store.get_task(cmd.task_id) if cmd.task_id is not None else None
        if task is None:
            raise TaskNotFound()
        if task.user_id != identity.id:
            raise Forbidden()

        if cmd.status is None:
            new_status = NEXT_STATUS.get(task.status)
            if new_status is None:
                raise AlreadyDone()
        elif cmd.status not in TASK_STATUSES:
            raise InvalidStatus()
        else:
            # explicit set may move backwards, e.g. done -> pending
            new_status = cmd.status

        updated = self.store.set_task_status(task.id, new_status)
        if updated is None:
            raise TaskNotFound()
        logger.debug("task_status_changed", task_id=task.id, old=task.status, new=new_status)
        return updated
