from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import EmailTaken, InternalError
from .logging_setup import get_logger
from .models import Task, User

logger = get_logger(__name__)


@dataclass(frozen=True)
class UserRecord:
    id: int
    name: str
    email: str


@dataclass(frozen=True)
class TaskRecord:
    id: int
    user_id: int
    title: str
    description: str | None
    status: str
    created_at: int


def _user(u: User) -> UserRecord:
    return UserRecord(id=int(u.id), name=u.name, email=u.email)


def _task(t: Task) -> TaskRecord:
    return TaskRecord(
        id=int(t.id),
        user_id=int(t.user_id),
        title=t.title,
        description=t.description,
        status=str(t.status),
        created_at=int(t.created_at),
    )


class Store:
    """Users and tasks on top of a SQLAlchemy engine.

    Every method opens its own short session; driver errors surface as
    ``InternalError`` with the original exception chained.
    """

    def __init__(self, engine):
        self.engine = engine

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with Session(self.engine) as s:
                yield s
        except SQLAlchemyError as exc:
            raise InternalError("database error") from exc

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as exc:
            logger.warning("database_ping_failed", error=str(exc))
            return False

    # users

    def email_exists(self, email: str) -> bool:
        with self._session() as s:
            return s.execute(select(User.id).where(User.email == email)).first() is not None

    def create_user(self, name: str, email: str, password_hash: str) -> UserRecord:
        with self._session() as s:
            u = User(name=name, email=email, password_hash=password_hash)
            s.add(u)
            try:
                s.commit()
            except IntegrityError as exc:
                # lost a race with a concurrent registration for the same email
                s.rollback()
                raise EmailTaken() from exc
            s.refresh(u)
            return _user(u)

    def get_login_candidate(self, email: str) -> tuple[UserRecord, str] | None:
        """Return the user and its stored hash, for password verification only."""
        with self._session() as s:
            u = s.execute(select(User).where(User.email == email)).scalars().first()
            if u is None:
                return None
            return _user(u), u.password_hash

    # tasks

    def create_task(self, user_id: int, title: str, description: str | None, created_at: int) -> TaskRecord:
        with self._session() as s:
            t = Task(user_id=user_id, title=title, description=description, status="pending", created_at=created_at)
            s.add(t)
            s.commit()
            s.refresh(t)
            return _task(t)

    def list_tasks(self, user_id: int) -> list[TaskRecord]:
        with self._session() as s:
            rows = (
                s.execute(
                    select(Task)
                    .where(Task.user_id == user_id)
                    .order_by(Task.created_at.desc(), Task.id.desc())
                )
                .scalars()
                .all()
            )
            return [_task(t) for t in rows]

    def get_task(self, task_id: int) -> TaskRecord | None:
        with self._session() as s:
            t = s.get(Task, task_id)
            return _task(t) if t is not None else None

    def set_task_status(self, task_id: int, status: str) -> TaskRecord | None:
        with self._session() as s:
            t = s.get(Task, task_id)
            if t is None:
                return None
            t.status = status
            s.add(t)
            s.commit()
            s.refresh(t)
            return _task(t)
