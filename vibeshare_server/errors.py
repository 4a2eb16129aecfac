# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Domain errors raised by services and rendered by the API error handler."""

from typing import Any

from fastapi import status


class ServiceError(Exception):
    """Base for errors that map onto an HTTP status.

    Extra keyword arguments are included in the JSON body next to ``detail``.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal server error"

    def __init__(self, detail: str | None = None, **extra: Any) -> None:
        self.detail = detail or self.default_detail
        self.extra = extra
        super().__init__(self.detail)


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class UserNotFound(NotFound):
    default_detail = "User not found"


class TargetNotFound(NotFound):
    default_detail = "Target user not found"


class CollectionNotFound(NotFound):
    default_detail = "Collection not found"


class TrackNotFound(NotFound):
    default_detail = "Track not found"


class TagNotFound(NotFound):
    default_detail = "Tag not found"


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"


class Conflict(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"


class DuplicateName(Conflict):
    default_detail = "A collection with this name already exists"


class ValidationFailed(ServiceError):
    status_code = 422
    default_detail = "Invalid request"


class InvalidReference(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Track reference has no usable identifier"


class ResolutionFailed(ServiceError):
    default_detail = "Failed to create or find track"
