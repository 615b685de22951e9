from typing import Iterable, List, Optional


class VaultError(Exception):
    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[Iterable[str]] = None,
        method: Optional[str] = None,
        url: Optional[str] = None,
    ):
        self.errors: List[str] = list(errors or [])
        if self.errors and not message:
            message = ", ".join(self.errors)

        self.method = method
        self.url = url

        super().__init__(message)

    def __str__(self):
        if self.method is None and self.url is None:
            return str(self.args[0])
        return "{0}, on {1} {2}".format(self.args[0], self.method, self.url)


class ClientError(VaultError):
    """Raised when the client is misused locally. No request reaches Vault."""


class NotAuthenticated(ClientError):
    """Raised when a call needs a session token and the client has not logged in."""


class InvalidArgument(ClientError):
    """Raised when an argument is invalid, e.g. unwrapping with the session token."""


class InvalidMountPath(ClientError):
    """Raised when a secret engine mount path is not valid."""


class UnsupportedReturnType(ClientError):
    """Raised when a secret is requested as a type other than string or bytes."""


class UnsupportedURL(ClientError):
    """Raised when no registered resource parser accepts a URI."""


class DecodingFailed(ClientError):
    """Raised when a Vault response does not have the expected shape."""


class ServerError(VaultError):
    """Raised when Vault reports an error."""

    status_code: int = 0

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[Iterable[str]] = None,
        method: Optional[str] = None,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message, errors=errors, method=method, url=url)


class BadRequest(ServerError):
    """Raised when the request is invalid."""

    status_code = 400


class Forbidden(ServerError):
    """Raised when the request is forbidden."""

    status_code = 403


class InternalServerError(ServerError):
    """Raised when the Vault server returns a 500 error."""

    status_code = 500


class OperationFailed(ServerError):
    """Raised for any status code without a dedicated error."""


class Unauthorized(OperationFailed):
    """Raised when the client is not authorized to perform the requested operation."""

    status_code = 401


class InvalidPath(OperationFailed):
    """Raised when the path is invalid."""

    status_code = 404


class UnsupportedOperation(OperationFailed):
    """Raised when the HTTP method is not supported on the path."""

    status_code = 405


class RateLimitExceeded(OperationFailed):
    """Raised when the rate limit has been exceeded."""

    status_code = 429


class VaultNotInitialized(OperationFailed):
    """Raised when Vault is not initialized"""

    status_code = 501


class BadGateway(OperationFailed):
    """Raised when Vault failed talking to a third party."""

    status_code = 502


class VaultDown(OperationFailed):
    """Raised when Vault is down or sealed."""

    status_code = 503
