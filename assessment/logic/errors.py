"""Exceptions raised by the assessment pipeline and its collaborators."""


class AdvisorError(Exception):
    """Base class for all domain errors."""


class InputShapeError(AdvisorError):
    """Request payload is missing or has the wrong shape."""


class ExternalServiceError(AdvisorError):
    """Generation or embedding service failed, timed out or is not configured."""


class MalformedResponseError(ExternalServiceError):
    """Generation service answered with text that does not match the expected JSON schema."""


class NotFoundError(AdvisorError):
    pass


class AuthorizationError(AdvisorError):
    """Caller does not own the requested resource."""
