from __future__ import annotations

from fastapi import Header, Request

from .auth import Identity
from .errors import MalformedHeader, NoCredential, TokenError
from .logging_setup import get_logger
from .service import TaskService

logger = get_logger(__name__)


def get_service(request: Request) -> TaskService:
    return request.app.state.service


def get_current_identity(request: Request, authorization: str | None = Header(default=None)) -> Identity:
    if not authorization:
        raise NoCredential()
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise MalformedHeader()
    try:
        identity = request.app.state.issuer.verify(parts[1])
    except TokenError as exc:
        logger.info("token_rejected", reason=exc.reason, path=request.url.path)
        raise
    request.state.identity = identity
    return identity
