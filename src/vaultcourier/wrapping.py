import logging
from datetime import datetime
from typing import Any, Dict, Optional, Type, TypeVar, Union, overload

from pydantic import BaseModel, ValidationError

from ._client import Client, Record
from ._session import SessionTokenStore, TokenAuth
from .errors import DecodingFailed, InvalidArgument

logger = logging.getLogger("vaultcourier")

T = TypeVar("T", bound=BaseModel)


class WrappedResponse(BaseModel):
    """A response-wrapped token. The wrapped payload stays on the server until unwrapped."""

    request_id: str = ""
    token: str
    accessor: str = ""
    ttl: int
    creation_time: datetime
    creation_path: str = ""
    wrapped_accessor: str = ""

    @classmethod
    def from_record(cls, record: Record) -> "WrappedResponse":
        if record.wrap_info is None:
            raise DecodingFailed("Response is missing wrap_info")
        return cls(request_id=record.request_id, **record.wrap_info.model_dump())

    def __repr__(self) -> str:
        return f"WrappedResponse(accessor={self.accessor!r}, ttl={self.ttl}, creation_path={self.creation_path!r})"


class WrappedTokenInfo(BaseModel):
    request_id: str = ""
    ttl: int
    creation_time: datetime
    creation_path: str = ""


class SecretIdResponse(BaseModel):
    request_id: str = ""
    secret_id: str
    secret_id_accessor: str = ""
    secret_id_ttl: int = 0
    secret_id_num_uses: int = 0

    def __repr__(self) -> str:
        return f"SecretIdResponse(secret_id_accessor={self.secret_id_accessor!r}, secret_id_ttl={self.secret_id_ttl})"


def format_ttl(ttl: Union[int, str]) -> str:
    return f"{ttl}s" if isinstance(ttl, int) else ttl


class UnwrapService:
    """Response-wrapping endpoints of the system backend."""

    def __init__(self, client: Client, store: SessionTokenStore) -> None:
        self._client = client
        self._store = store

    @overload
    async def unwrap(self, token: str) -> Record:
        ...

    @overload
    async def unwrap(self, token: str, model: Type[T]) -> T:
        ...

    async def unwrap(self, token: str, model: Optional[Type[T]] = None) -> Union[Record, T]:
        """Unwraps a response-wrapped token.

        The wrapping token itself authorizes the call. Unwrapping with the session token is
        refused before any request is made, since a successful unwrap would revoke it.
        """

        if not token:
            raise InvalidArgument("Wrapping token must not be empty")
        if token == self._store.get():
            raise InvalidArgument("Wrapping token and client session token cannot be the same")

        logger.debug("Unwrapping response at sys/wrapping/unwrap")
        response = await self._client.post("/sys/wrapping/unwrap", auth=TokenAuth(token))
        record = response.record
        if model is None:
            return record

        try:
            return model.model_validate(dict(record.data, request_id=record.request_id))
        except ValidationError as e:
            raise DecodingFailed(f"Unwrapped data is not a {model.__name__}", method="post", url=response.url) from e

    async def unwrap_app_role_secret_id(self, token: str) -> SecretIdResponse:
        return await self.unwrap(token, SecretIdResponse)

    async def wrap(self, secrets: Dict[str, Any], ttl: Union[int, str]) -> WrappedResponse:
        response = await self._client.post(
            "/sys/wrapping/wrap",
            headers={"X-Vault-Wrap-TTL": format_ttl(ttl)},
            json=secrets,
        )
        logger.debug("Secrets wrapped")
        return WrappedResponse.from_record(response.record)

    async def lookup(self, token: str) -> WrappedTokenInfo:
        response = await self._client.post("/sys/wrapping/lookup", json={"token": token})
        data = response.data
        try:
            return WrappedTokenInfo(
                request_id=response.record.request_id,
                ttl=data.get("creation_ttl"),
                creation_time=data.get("creation_time"),
                creation_path=data.get("creation_path") or "",
            )
        except ValidationError as e:
            raise DecodingFailed("Unexpected wrapping lookup payload", method="post", url=response.url) from e

    async def rewrap(self, token: str) -> WrappedResponse:
        response = await self._client.post("/sys/wrapping/rewrap", json={"token": token})
        logger.debug("Wrapping token rewrapped")
        return WrappedResponse.from_record(response.record)
