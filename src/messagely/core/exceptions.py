"""Error kinds raised by the messagely core.

Every error carries a short machine-readable ``code`` and a human-readable
``detail``. The HTTP layer translates codes into transport responses; nothing
in the core knows about status codes.
"""


class MessagelyError(Exception):
    """Base class for all core errors."""

    code: str = "error"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class NotFoundError(MessagelyError):
    """A referenced user or message does not exist."""

    code = "not_found"


class DuplicateIdentityError(MessagelyError):
    """Registration collided with an existing username."""

    code = "duplicate_identity"

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"Username '{username}' is already taken")


class InvalidArgumentError(MessagelyError):
    code = "invalid_argument"


class InvalidCredentialsError(MessagelyError):
    """Known user, wrong password."""

    code = "invalid_credentials"


class ForbiddenError(MessagelyError):
    """The acting user has no rights over the resource."""

    code = "forbidden"


class AlreadyReadError(MessagelyError):
    """The message already carries a read timestamp."""

    code = "already_read"

    def __init__(self, message_id: int):
        self.message_id = message_id
        super().__init__(f"Message {message_id} is already marked as read")


class SessionTokenError(MessagelyError):
    """Base class for session token recovery failures."""


class InvalidTokenError(SessionTokenError):
    code = "invalid_token"


class ExpiredTokenError(SessionTokenError):
    code = "expired_token"


class MalformedTokenError(SessionTokenError):
    code = "malformed_token"


class ConfigurationError(MessagelyError):
    code = "configuration_error"
