from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional, Sequence, Type, TypeVar, Union, overload

import httpx
from pydantic import BaseModel

from ._auth import Authenticator, AuthMethod, get_auth_method
from ._client import AuthResult, Client, Record
from ._session import SessionTokenAuth, SessionTokenStore
from .approle import AppRoleClient
from .config import Config
from .database import DatabaseClient, DatabaseCredentials, DatabaseRole
from .kv import KeyValueClient, KeyValueMetadata
from .parsers import DatabaseReaderParser, KeyValueDataPathParser, KeyValueReaderParser, ResourceParser
from .reader import ResourceReader
from .wrapping import SecretIdResponse, UnwrapService, WrappedResponse, WrappedTokenInfo

logger = logging.getLogger("vaultcourier")

T = TypeVar("T", bound=BaseModel)


class VaultClient:
    """Async client for a Vault or OpenBao server.

    The client owns its session token. Log in with :meth:`login` before any call that needs
    it; such calls raise :class:`~vaultcourier.errors.NotAuthenticated` otherwise.
    """

    @overload
    def __init__(
        self,
        address: Optional[str] = ...,
        *,
        timeout: Optional[int] = ...,
        namespace: Optional[str] = ...,
        auth_method: str = ...,
        auth_params: Dict[str, Any] = ...,
        transport: Optional[httpx.AsyncBaseTransport] = ...,
    ) -> None:
        ...

    @overload
    def __init__(self, config: Config, /, *, transport: Optional[httpx.AsyncBaseTransport] = ...) -> None:
        ...

    def __init__(
        self,
        address: Union[str, Config, None] = None,
        *,
        timeout: Optional[int] = None,
        namespace: Optional[str] = None,
        auth_method: str = "token",
        auth_params: Optional[Dict[str, Any]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if isinstance(address, Config):
            config = address
        else:
            config = Config(
                timeout=timeout,
                namespace=namespace,
                auth_method=auth_method,
                auth_params=auth_params or {},
                **({"address": address} if address else {}),
            )

        self.config = config
        self._store = SessionTokenStore()
        self._client = Client(
            address=config.api_url,
            timeout=config.timeout,
            namespace=config.namespace,
            auth=SessionTokenAuth(self._store),
            transport=transport,
        )
        self._unwrapper = UnwrapService(self._client, self._store)
        self._authenticator = Authenticator(self._client, self._store, self._unwrapper)
        self._kv = KeyValueClient(self._client)
        self._database = DatabaseClient(self._client)

    @property
    def api_url(self) -> str:
        return self.config.api_url

    def session_token(self) -> str:
        return self._store.require()

    def reset_session(self) -> None:
        self._store.set(None)

    async def login(self, method: Optional[AuthMethod] = None) -> bool:
        """Authenticates with ``method``, or with the configured auth method, and installs the session token."""

        return await self._authenticator.authenticate(method or get_auth_method(self.config))

    # response wrapping

    @overload
    async def unwrap(self, token: str) -> Record:
        ...

    @overload
    async def unwrap(self, token: str, model: Type[T]) -> T:
        ...

    async def unwrap(self, token: str, model: Optional[Type[T]] = None) -> Union[Record, T]:
        if model is None:
            return await self._unwrapper.unwrap(token)
        return await self._unwrapper.unwrap(token, model)

    async def wrap(self, secrets: Dict[str, Any], ttl: Union[int, str]) -> WrappedResponse:
        return await self._unwrapper.wrap(secrets, ttl)

    async def lookup_wrapping(self, token: str) -> WrappedTokenInfo:
        return await self._unwrapper.lookup(token)

    async def rewrap(self, token: str) -> WrappedResponse:
        return await self._unwrapper.rewrap(token)

    # approle

    def app_role(self, mount: Optional[str] = None) -> AppRoleClient:
        return AppRoleClient(self._client, mount or self.config.mounts.app_role)

    async def app_role_id(self, name: str, mount: Optional[str] = None) -> str:
        return await self.app_role(mount).role_id(name)

    async def generate_app_secret_id(
        self,
        name: str,
        *,
        mount: Optional[str] = None,
        wrap_ttl: Union[int, str, None] = None,
        **kwargs: Any,
    ) -> Union[SecretIdResponse, WrappedResponse]:
        return await self.app_role(mount).generate_secret_id(name, wrap_ttl=wrap_ttl, **kwargs)

    async def login_token(self, role_id: str, secret_id: str, mount: Optional[str] = None) -> AuthResult:
        """Logs in with AppRole credentials without touching this client's session token."""

        return await self.app_role(mount).login(role_id, secret_id)

    # secret engines

    async def write_kv_secret(self, mount: str, key: str, data: Dict[str, Any]) -> KeyValueMetadata:
        return await self._kv.write(mount, key, data)

    async def read_kv_secret(self, mount: str, key: str, version: Optional[int] = None) -> Dict[str, Any]:
        return await self._kv.read(mount, key, version)

    async def read_kv_secret_data(self, mount: str, key: str, version: Optional[int] = None) -> bytes:
        return await self._kv.read_data(mount, key, version)

    async def database_credentials(self, mount: str, role: DatabaseRole) -> DatabaseCredentials:
        return await self._database.credentials(mount, role)

    async def read_database_credentials_data(self, mount: str, role: DatabaseRole) -> bytes:
        return await self._database.read_data(mount, role)

    # resource readers

    def default_parsers(self) -> Sequence[ResourceParser]:
        mounts = self.config.mounts
        return [
            KeyValueDataPathParser(mounts.kv),
            KeyValueReaderParser(mounts.kv),
            DatabaseReaderParser(mounts.database),
        ]

    def make_resource_reader(
        self,
        parsers: Optional[Sequence[ResourceParser]] = None,
        schemes: Optional[Iterable[str]] = None,
    ) -> ResourceReader:
        return ResourceReader(
            self,
            parsers if parsers is not None else self.default_parsers(),
            schemes if schemes is not None else (self.config.scheme,),
        )

    async def read_configuration(self, text: str, reader: Optional[ResourceReader] = None) -> str:
        return await (reader or self.make_resource_reader()).resolve(text)

    async def __aenter__(self) -> VaultClient:
        await self._client.__aenter__()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self._client.__aexit__(*exc_info)

    async def aclose(self) -> None:
        await self._client.aclose()

    def __repr__(self) -> str:
        return f"VaultClient({self.api_url!r})"


async def get_secret(
    uri: str,
    config: Optional[Config] = None,
    *,
    address: Optional[str] = None,
    timeout: Optional[int] = None,
    namespace: Optional[str] = None,
    auth_method: Optional[str] = None,
    auth_params: Optional[Dict[str, Any]] = None,
) -> bytes:
    """Logs in and reads one resource URI with the default parsers."""

    config = config or Config(
        timeout=timeout,
        namespace=namespace,
        auth_method=auth_method or "token",
        auth_params=auth_params or {},
        **({"address": address} if address else {}),
    )
    async with VaultClient(config) as vault:
        await vault.login()
        return await vault.make_resource_reader().read(uri)
