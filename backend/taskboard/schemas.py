from __future__ import annotations

from pydantic import BaseModel

from .commands import AdvanceStatusCommand, CreateTaskCommand, LoginCommand, RegisterCommand


class RegisterIn(BaseModel):
    # optional here so absent fields become MissingFields (400) instead of a 422
    name: str | None = None
    email: str | None = None
    password: str | None = None

    def to_command(self) -> RegisterCommand:
        return RegisterCommand(name=self.name, email=self.email, password=self.password)


class LoginIn(BaseModel):
    email: str | None = None
    password: str | None = None

    def to_command(self) -> LoginCommand:
        return LoginCommand(email=self.email, password=self.password)


class TaskCreate(BaseModel):
    title: str | None = None
    description: str | None = None

    def to_command(self) -> CreateTaskCommand:
        return CreateTaskCommand(title=self.title, description=self.description)


class StatusIn(BaseModel):
    status: str | None = None  # pending|in_progress|done, omitted for implicit advance

    def to_command(self, task_id: str) -> AdvanceStatusCommand:
        return AdvanceStatusCommand(task_id=task_id, status=self.status)


class UserOut(BaseModel):
    id: int
    name: str
    email: str


class AuthOut(BaseModel):
    user: UserOut
    token: str


class TaskOut(BaseModel):
    id: int
    user_id: int
    title: str
    description: str | None = None
    status: str
    created_at: int


class HealthOut(BaseModel):
    status: str
    database: str
    timestamp: str
