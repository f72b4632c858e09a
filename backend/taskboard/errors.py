from __future__ import annotations


class TaskboardError(Exception):
    """Expected failure returned to the client as ``{"detail", "code"}``."""

    status_code = 500
    code = "InternalError"
    message = "internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.detail = message or self.message


# 400
class ValidationError(TaskboardError):
    status_code = 400
    code = "ValidationError"
    message = "invalid request"


class MissingFields(ValidationError):
    code = "MissingFields"
    message = "missing required fields"


class MissingTitle(ValidationError):
    code = "MissingTitle"
    message = "title is required"


class InvalidStatus(ValidationError):
    code = "InvalidStatus"
    message = "status must be pending|in_progress|done"


class AlreadyDone(ValidationError):
    code = "AlreadyDone"
    message = "task is already done"


class InvalidCredentials(ValidationError):
    code = "InvalidCredentials"
    message = "invalid credentials"


class ConflictError(TaskboardError):
    status_code = 400
    code = "ConflictError"
    message = "conflict"


class EmailTaken(ConflictError):
    code = "EmailTaken"
    message = "email already registered"


# 401
class AuthError(TaskboardError):
    status_code = 401
    code = "Unauthorized"
    message = "unauthorized"


class NoCredential(AuthError):
    code = "NoCredential"
    message = "no token provided"


class MalformedHeader(AuthError):
    code = "MalformedHeader"
    message = "malformed authorization header"


class TokenError(AuthError):
    """Token rejected by the verifier.

    Every variant shares the client-visible code and message; ``reason``
    tells them apart in logs and tests.
    """

    code = "InvalidToken"
    message = "invalid token"
    reason = "invalid"


class TokenMalformed(TokenError):
    reason = "malformed"


class TokenInvalidSignature(TokenError):
    reason = "invalid_signature"


class TokenExpired(TokenError):
    reason = "expired"


# 403 / 404
class OwnershipError(TaskboardError):
    status_code = 403
    code = "OwnershipError"
    message = "forbidden"


class Forbidden(OwnershipError):
    code = "Forbidden"
    message = "access denied"


class NotFoundError(TaskboardError):
    status_code = 404
    code = "NotFoundError"
    message = "not found"


class TaskNotFound(NotFoundError):
    code = "TaskNotFound"
    message = "task not found"


# 500
class InternalError(TaskboardError):
    pass
