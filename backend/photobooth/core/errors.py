"""Error taxonomy shared by the services and the HTTP layer.

Every error carries the HTTP status it maps to and a message that is safe to
show to the caller. Upstream causes are chained with ``raise ... from`` and
logged server-side only.
"""


class PhotoboothError(Exception):
    """Base class for errors rendered as ``{"message": ...}`` responses."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ClientInputError(PhotoboothError):
    """Missing or malformed input (fields, answers, uploaded file)."""

    status_code = 400


class AuthorizationError(PhotoboothError):
    """Submitted access code does not match the configuration."""

    status_code = 403


class NotConfiguredError(AuthorizationError):
    """No configuration exists for a variant that requires one."""


class NotFoundError(PhotoboothError):
    """Requested document does not exist."""

    status_code = 404


class UpstreamServiceError(PhotoboothError):
    """Object storage, image generation or document store failed."""

    status_code = 500
