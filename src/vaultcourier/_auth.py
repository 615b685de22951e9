import logging
import os
from typing import Literal, Optional, Union

from pydantic import BaseModel

from ._client import Client
from ._session import SessionTokenStore
from .approle import AppRoleClient
from .config import Config
from .errors import InvalidArgument
from .wrapping import UnwrapService

logger = logging.getLogger("vaultcourier")


class TokenMethod(BaseModel):
    kind: Literal["token"] = "token"
    token: Optional[str] = None

    def __repr__(self) -> str:
        return "TokenMethod(token=<redacted>)"


class AppRoleMethod(BaseModel):
    kind: Literal["approle"] = "approle"
    role_id: str
    secret_id: str
    is_wrapped: bool = False
    mount: str = "approle"

    def __repr__(self) -> str:
        return f"AppRoleMethod(role_id={self.role_id!r}, is_wrapped={self.is_wrapped}, mount={self.mount!r})"


AuthMethod = Union[TokenMethod, AppRoleMethod]


def get_auth_method(config: Config) -> AuthMethod:
    params = config.auth_params.copy()
    if config.auth_method == "token":
        return TokenMethod(token=params.get("token", None))
    elif config.auth_method == "approle":
        params.setdefault("mount", config.mounts.app_role)
        return AppRoleMethod(**params)
    else:
        raise ValueError(f"Unknown auth kind: {config.auth_method}")


def get_token_from_env() -> Optional[str]:
    token = os.getenv("VAULT_TOKEN")
    if not token:
        token_file_path = os.path.expanduser("~/.vault-token")
        if os.path.exists(token_file_path):
            with open(token_file_path, "r") as f_in:
                token = f_in.read().strip()

    return token or None


class Authenticator:
    """Logs in with an auth method and installs the resulting session token.

    Nothing waits for requests already in flight with the previous token; those may fail
    once the server revokes it.
    """

    def __init__(self, client: Client, store: SessionTokenStore, unwrapper: UnwrapService) -> None:
        self._client = client
        self._store = store
        self._unwrapper = unwrapper

    async def authenticate(self, method: AuthMethod) -> bool:
        if isinstance(method, TokenMethod):
            token = method.token or get_token_from_env()
            if not token:
                raise InvalidArgument("Token has not been set in token auth method")
            self._store.set(token)
            logger.info("Session token set from token auth method")
            return True

        elif isinstance(method, AppRoleMethod):
            secret_id = method.secret_id
            if method.is_wrapped:
                unwrapped = await self._unwrapper.unwrap_app_role_secret_id(secret_id)
                secret_id = unwrapped.secret_id

            auth = await AppRoleClient(self._client, method.mount).login(method.role_id, secret_id)
            self._store.set(auth.client_token)
            logger.info("Login authorized with approle at auth/%s", method.mount)
            return True

        raise InvalidArgument(f"Unsupported auth method: {type(method).__name__}")
