"""
Error taxonomy shared by services and routers.
Every failure reaches the caller as {"error": kind, "message": text}.
"""
from fastapi import status


class AdegaError(Exception):
    kind = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


class InvalidArgument(AdegaError):
    kind = "invalid_argument"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(AdegaError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(AdegaError):
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class Internal(AdegaError):
    kind = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
