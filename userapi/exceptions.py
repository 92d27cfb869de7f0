"""Error taxonomy for the user API and its administrative servers."""


class UserApiError(Exception):
    """Base class for all errors raised by this package."""


class UserServiceError(UserApiError):
    """Failure outcome of a user service operation."""


class NotFoundError(UserServiceError):
    """No user matches the requested id or email."""

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class DuplicateEmailError(UserServiceError):
    """Another user already owns the email."""

    def __init__(self, email: str):
        super().__init__(f"Email already registered: {email}")
        self.email = email


class BootstrapError(UserApiError):
    """Administrative server startup failed; the process must not serve traffic."""


class BindError(BootstrapError):
    """A server could not bind its listening port."""

    def __init__(self, name: str, host: str, port: int, reason: Exception):
        super().__init__(f"{name} could not bind {host}:{port}: {reason}")
        self.name = name
        self.host = host
        self.port = port
        self.reason = reason


class DependencyNotReadyError(BootstrapError):
    """A server was started before the server it depends on."""


class RawProtocolError(UserApiError):
    """The raw data server refused a session or sent an unreadable reply."""
