import threading
from typing import Generator, Optional

import httpx

from .errors import NotAuthenticated

TOKEN_HEADER = "X-Vault-Token"


class SessionTokenStore:
    """Holds the session token of one client.

    Reads and writes are single swaps under a lock, so a token is never partially visible
    and the lock is never held across a request.
    """

    def __init__(self, token: Optional[str] = None) -> None:
        self._lock = threading.Lock()
        self._token = token

    def get(self) -> Optional[str]:
        with self._lock:
            return self._token

    def set(self, token: Optional[str]) -> None:
        with self._lock:
            self._token = token

    def require(self) -> str:
        token = self.get()
        if token is None:
            raise NotAuthenticated("Vault client has not authenticated")
        return token

    def __repr__(self) -> str:
        return f"SessionTokenStore(authenticated={self.get() is not None})"


class SessionTokenAuth(httpx.Auth):
    """Sends the token current at request time."""

    def __init__(self, store: SessionTokenStore) -> None:
        self.store = store

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers[TOKEN_HEADER] = self.store.require()
        yield request


class TokenAuth(httpx.Auth):
    def __init__(self, token: str) -> None:
        self.token = token

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers[TOKEN_HEADER] = self.token
        yield request
