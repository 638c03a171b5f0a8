"""Domain errors raised by the recipebox services.

Every error carries the HTTP status it maps to and a stable ``code`` so the
client can branch on the failure kind without parsing messages. Routers let
these propagate; ``main.py`` installs one handler that renders them.
"""


class RecipeBoxError(Exception):
    """Base exception for all domain failures."""
    status_code = 400
    code = "error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message())

    @classmethod
    def default_message(cls) -> str:
        return cls.__name__

    @property
    def detail(self) -> str:
        return str(self)


class Unauthenticated(RecipeBoxError):
    """No principal present where one is required."""
    status_code = 401
    code = "unauthenticated"

    @classmethod
    def default_message(cls) -> str:
        return "Not authenticated"


class NotAuthorized(RecipeBoxError):
    """Principal present but lacks rights over the target."""
    status_code = 403
    code = "not_authorized"

    @classmethod
    def default_message(cls) -> str:
        return "Not authorized"


class NotOwner(NotAuthorized):
    code = "not_owner"

    @classmethod
    def default_message(cls) -> str:
        return "Not the owner"


class NotFriends(NotAuthorized):
    code = "not_friends"

    @classmethod
    def default_message(cls) -> str:
        return "Can only share with friends"


class NotFound(RecipeBoxError):
    status_code = 404
    code = "not_found"

    @classmethod
    def default_message(cls) -> str:
        return "Not found"


class InvalidOperation(RecipeBoxError):
    """Structurally nonsensical request."""
    status_code = 400
    code = "invalid_operation"

    @classmethod
    def default_message(cls) -> str:
        return "Invalid operation"


class CannotAcceptOwnRequest(InvalidOperation):
    code = "cannot_accept_own_request"

    @classmethod
    def default_message(cls) -> str:
        return "Cannot accept your own request"


class Conflict(RecipeBoxError):
    """Current state forbids re-applying the request."""
    status_code = 409
    code = "conflict"

    @classmethod
    def default_message(cls) -> str:
        return "Conflict"


class AlreadyFriends(Conflict):
    code = "already_friends"

    @classmethod
    def default_message(cls) -> str:
        return "Already friends"


class RequestPending(Conflict):
    code = "request_pending"

    @classmethod
    def default_message(cls) -> str:
        return "Friend request already pending"


class Blocked(Conflict):
    code = "blocked"

    @classmethod
    def default_message(cls) -> str:
        return "Cannot send request to this user"


class NotPending(Conflict):
    code = "not_pending"

    @classmethod
    def default_message(cls) -> str:
        return "Request is not pending"


class AlreadyShared(Conflict):
    code = "already_shared"

    @classmethod
    def default_message(cls) -> str:
        return "Recipe already shared with this user"


class Exhausted(RecipeBoxError):
    """A bounded retry loop ran out of attempts."""
    status_code = 503
    code = "exhausted"

    @classmethod
    def default_message(cls) -> str:
        return "Retry limit exhausted"


class CodeGenerationExhausted(Exhausted):
    code = "code_generation_exhausted"

    @classmethod
    def default_message(cls) -> str:
        return "Failed to generate unique share code"
