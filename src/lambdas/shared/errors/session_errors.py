"""Session cookie error types.

Configuration and validation problems raise; authentication failures do
not. A signature mismatch is a ``False`` result from the verify helpers,
never an exception.
"""


class SessionError(Exception):
    """Base class for session-cookie errors."""

    pass


class SessionConfigError(SessionError):
    """Session cookie configuration is missing or unsafe.

    Raised at the point of use when the signing secret is absent or
    shorter than 32 bytes, or when the configured cookie name is not a
    valid cookie token. Never silently defaulted.
    """

    def __init__(self, setting: str, reason: str):
        self.setting = setting
        self.reason = reason
        super().__init__(f'"{setting}": {reason}')


class InvalidCookieError(SessionError, ValueError):
    """A cookie name, value or attribute cannot be serialized.

    Raised by ``serialize_cookie`` so a malformed ``Set-Cookie`` header is
    never emitted.
    """

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(message or f"option {field} is invalid")


class SessionDecodeError(SessionError, ValueError):
    """The payload portion of a session cookie is not base64-encoded JSON."""

    pass
