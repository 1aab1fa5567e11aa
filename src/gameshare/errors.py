"""Domain errors raised by the service layer.

Each error carries a stable ``code`` and the HTTP status the API layer renders it with.
Services raise these and never catch them; ``gameshare.api.errors`` maps them to responses.
"""

from fastapi import status


class ServiceError(Exception):
    """Base class for domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "SERVICE_ERROR"
    default_detail: str = "Request could not be processed"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_detail = "Resource not found"


class GameNotFoundError(NotFoundError):
    code = "GAME_NOT_FOUND"
    default_detail = "Game not found"


class GameImageNotFoundError(NotFoundError):
    code = "GAME_IMAGE_NOT_FOUND"
    default_detail = "Game image not found"


class MemberNotFoundError(NotFoundError):
    code = "MEMBER_NOT_FOUND"
    default_detail = "Member not found"


class StarredGameNotFoundError(NotFoundError):
    code = "STARRED_GAME_NOT_FOUND"
    default_detail = "Game is not starred"


class AlreadyExistsError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "ALREADY_EXISTS"
    default_detail = "Resource already exists"


class AlreadyStarredError(AlreadyExistsError):
    code = "ALREADY_STARRED"
    default_detail = "Game is already starred"


class AlreadyReportedError(AlreadyExistsError):
    code = "ALREADY_REPORTED"
    default_detail = "Game has already been reported by this member"


class AccessDeniedError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "ACCESS_DENIED"
    default_detail = "Not authorized to modify this game"


class InvalidInputError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_INPUT"
    default_detail = "Invalid input"


class PayloadTooLargeError(ServiceError):
    status_code = 413
    code = "PAYLOAD_TOO_LARGE"
    default_detail = "File too large"


class UnsupportedExtensionError(ServiceError):
    # Unsupported image formats share the out-of-range status used for request validation
    status_code = 414
    code = "EXTENSION_NOT_ALLOWED"
    default_detail = "Unsupported image type"
