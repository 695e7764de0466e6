"""
core/errors.py -- Application error taxonomy.

Every component translates its failures into exactly one of these kinds before
letting them propagate. The HTTP layer maps them onto the uniform
{"status": <int>, "message": <str>} envelope (see api/main.py).

  BadRequest           400  malformed or missing input
  Unauthorized         401  missing, invalid, expired or revoked token
  NotFound             404  referenced entity does not resolve
  Conflict             409  uniqueness violation on create/update
  InternalServerError  500  storage or unexpected failure
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors that carry an HTTP status and a client-safe message."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"status": self.status_code, "message": self.message}


class BadRequest(AppError):
    status_code = 400


class Unauthorized(AppError):
    status_code = 401


class NotFound(AppError):
    status_code = 404


class Conflict(AppError):
    status_code = 409


class InternalServerError(AppError):
    status_code = 500
