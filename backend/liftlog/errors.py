# liftlog/errors.py
"""
One failure shape for every service call.

Services either return a value or raise a ``WorkoutError`` carrying an
``ErrorKind``. Routers never build error payloads themselves; the handler
registered in ``register_error_handlers`` maps the kind to a status code.
"""
from __future__ import annotations

import logging
from enum import Enum

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

log = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    not_found = "not_found"
    permission_denied = "permission_denied"
    validation = "validation"
    persistence = "persistence"


class WorkoutError(Exception):
    kind: ErrorKind = ErrorKind.validation

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(WorkoutError):
    kind = ErrorKind.not_found


class PermissionDenied(WorkoutError):
    kind = ErrorKind.permission_denied


class ValidationError(WorkoutError):
    kind = ErrorKind.validation


class TransientPersistenceError(WorkoutError):
    kind = ErrorKind.persistence


class DuplicateRow(TransientPersistenceError):
    """A unique constraint rejected the write; the transaction was rolled back."""


STATUS_BY_KIND = {
    ErrorKind.not_found: status.HTTP_404_NOT_FOUND,
    ErrorKind.permission_denied: status.HTTP_403_FORBIDDEN,
    ErrorKind.validation: status.HTTP_400_BAD_REQUEST,
    ErrorKind.persistence: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(WorkoutError)
    async def _workout_error(request: Request, exc: WorkoutError):
        code = STATUS_BY_KIND[exc.kind]
        if exc.kind is ErrorKind.persistence:
            log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=code, content={"detail": exc.message, "kind": exc.kind.value})
