import enum
from http import HTTPStatus
from typing import Any


class ErrorType(enum.Enum):
    ENTITY_ALREADY_EXISTS = "entity_already_exists"
    ENTITY_NOT_FOUND = "entity_not_found"
    INVALID_DATA = "invalid_data"
    MAILBOX_UNAVAILABLE = "mailbox_unavailable"
    THIRD_PARTY_REQUEST = "third_party_request"
    UNHANDLED_EXCEPTION = "unhandled_exception"
    UNSPECIFIED = "unspecified"


class BaseError(Exception):
    extra: dict[str, Any]

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.UNSPECIFIED,
        status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.status_code = status_code
        self.extra = {}

        action = kwargs.get("action")
        if action:
            self.extra["action"] = action
        account_id = kwargs.get("account_id")
        if account_id:
            self.extra["account_id"] = str(account_id)

    def __str__(self) -> str:
        return f"error: {self.error_type.value}; description: {self.message}"


class EntityAlreadyExistError(BaseError):
    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.ENTITY_ALREADY_EXISTS,
        status_code: HTTPStatus = HTTPStatus.CONFLICT,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_type, status_code, **kwargs)


class EntityNotFoundError(BaseError):
    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.ENTITY_NOT_FOUND,
        status_code: HTTPStatus = HTTPStatus.NOT_FOUND,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_type, status_code, **kwargs)


class AccountNotFoundError(EntityNotFoundError):
    def __init__(self, account_id: Any, **kwargs: Any) -> None:
        super().__init__("Email account not found", account_id=account_id, **kwargs)


class InvalidDataError(BaseError):
    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.INVALID_DATA,
        status_code: HTTPStatus = HTTPStatus.BAD_REQUEST,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_type, status_code, **kwargs)


class AccountConfigurationError(InvalidDataError):
    """Raised when a stored account lacks the fields needed to open a session."""


class MailboxConnectionError(BaseError):
    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.MAILBOX_UNAVAILABLE,
        status_code: HTTPStatus = HTTPStatus.BAD_GATEWAY,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_type, status_code, **kwargs)


class SMTPSendError(BaseError):
    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.THIRD_PARTY_REQUEST,
        status_code: HTTPStatus = HTTPStatus.BAD_GATEWAY,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_type, status_code, **kwargs)


class BackendRequestError(BaseError):
    """Raised by the API client when the backend answers with an error status."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.THIRD_PARTY_REQUEST,
        status_code: HTTPStatus = HTTPStatus.BAD_GATEWAY,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_type, status_code, **kwargs)
