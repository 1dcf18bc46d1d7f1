"""Error taxonomy shared by the stores, engines and HTTP layer."""


class VideoHubError(Exception):
    """Base class for domain errors."""

    status_code = 500
    error_code = "internal_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class InvalidArgument(VideoHubError):
    """Malformed id, non-positive page/limit, or missing required content."""

    status_code = 400
    error_code = "invalid_argument"


class NotFound(VideoHubError):
    """Referenced subject or entity does not exist."""

    status_code = 404
    error_code = "not_found"


class Forbidden(VideoHubError):
    """Actor is not the owner attempting an owner-only mutation."""

    status_code = 403
    error_code = "forbidden"


class Conflict(VideoHubError):
    """Uniqueness violation surfaced from the store."""

    status_code = 409
    error_code = "conflict"


class DataIntegrityError(VideoHubError):
    """A foreign-key invariant is violated (e.g. an entity with no owner)."""

    status_code = 500
    error_code = "data_integrity_error"


class Unavailable(VideoHubError):
    """The store cannot be reached."""

    status_code = 503
    error_code = "store_unavailable"
