from __future__ import annotations

import enum
import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

import httpx
from pydantic import BaseModel, Field, PrivateAttr, ValidationError, field_validator

from ._utils import normalize_path, raise_for_error
from .errors import DecodingFailed


class Outcome(str, enum.Enum):
    OK = "ok"
    BAD_REQUEST = "bad_request"
    UNDOCUMENTED = "undocumented"


class AuthResult(BaseModel):
    client_token: str
    accessor: str = ""
    policies: List[str] = Field(default_factory=list)
    token_policies: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    lease_duration: int = 0
    renewable: bool = False
    entity_id: str = ""
    token_type: str = "service"
    orphan: bool = False

    @field_validator("metadata", "policies", "token_policies", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any, info: Any) -> Any:
        if v is None:
            return {} if info.field_name == "metadata" else []
        return v


class WrapInfo(BaseModel):
    token: str
    accessor: str = ""
    ttl: int
    creation_time: datetime
    creation_path: str = ""
    wrapped_accessor: str = ""


class Record(BaseModel):
    request_id: str = ""
    lease_id: str = ""
    renewable: bool = False
    lease_duration: int = 0
    auth: Optional[AuthResult] = None
    wrap_info: Optional[WrapInfo] = None
    warnings: List[str] = Field(default_factory=list)
    data: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("data", "warnings", mode="before")
    @classmethod
    def _validate_empty(cls, v: Any, info: Any) -> Any:
        if v is None:
            return {} if info.field_name == "data" else []
        return v


class Response(BaseModel):
    method: str
    url: str
    status: int
    content: Union[bytes, str, Dict[str, Any]]
    headers: Dict[str, str] = Field(default_factory=dict)

    _record: Optional[Record] = PrivateAttr(None)

    @property
    def outcome(self) -> Outcome:
        if 200 <= self.status < 300:
            return Outcome.OK
        if self.status == 400:
            return Outcome.BAD_REQUEST
        return Outcome.UNDOCUMENTED

    @property
    def errors(self) -> List[str]:
        """Error strings of a Vault error body, or an empty list if the body has none."""

        content = self.content
        if isinstance(content, (str, bytes)):
            try:
                content = json.loads(content)
            except ValueError:
                return []
        if not isinstance(content, dict):
            return []
        errs = content.get("errors") or []
        return [str(e) for e in errs] if isinstance(errs, list) else []

    @property
    def record(self) -> Record:
        if self._record is None:
            try:
                if isinstance(self.content, (str, bytes)):
                    self._record = Record.model_validate_json(self.content)
                else:
                    self._record = Record.model_validate(self.content)
            except ValidationError as e:
                raise DecodingFailed(f"Unexpected response payload: {e}", method=self.method, url=self.url) from e
        return self._record

    @property
    def data(self) -> Dict[str, Any]:
        return self.record.data or {}

    @property
    def auth(self) -> Optional[AuthResult]:
        return self.record.auth

    def raise_for_error(self) -> None:
        outcome = self.outcome
        if outcome is Outcome.OK:
            return
        elif outcome is Outcome.BAD_REQUEST:
            raise_for_error(self.method, self.url, 400, self.errors)
        elif outcome is Outcome.UNDOCUMENTED:
            raise_for_error(self.method, self.url, self.status, self.errors)


class Client:
    _session: Optional[httpx.AsyncClient]
    _base_url: str
    _timeout: Optional[int]
    _headers: Dict[str, Any]
    _auth: Optional[httpx.Auth]
    _transport: Optional[httpx.AsyncBaseTransport]

    def __init__(
        self,
        address: str,
        auth: Optional[httpx.Auth] = None,
        timeout: Optional[int] = None,
        namespace: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._auth = auth
        self._session = None
        self._timeout = timeout
        self._base_url = address
        self._transport = transport
        self._headers = {"X-Vault-Request": "true"}
        if namespace:
            self._headers["X-Vault-Namespace"] = namespace

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def session(self) -> httpx.AsyncClient:
        if not self._session:
            self._session = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers=self._headers.copy(),
                auth=self._auth,
                transport=self._transport,
            )
        return self._session

    async def __aenter__(self) -> Client:
        await self.session.__aenter__()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        if self._session:
            await self._session.__aexit__(*exc_info)
        self._session = None

    async def aclose(self) -> None:
        if self._session:
            await self._session.aclose()
            self._session = None

    async def get(self, url: str, **kwargs: Any) -> Response:
        return await self.request("get", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> Response:
        return await self.request("post", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> Response:
        return await self.request("put", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> Response:
        return await self.request("delete", url, **kwargs)

    async def request(
        self,
        method: str,
        path: str,
        headers: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        auth: Any = httpx.USE_CLIENT_DEFAULT,
        raise_exception: bool = True,
        **kwargs: Any,
    ) -> Response:
        """Sends a request to Vault.

        ``auth`` overrides the client's authentication for this request only; ``None`` sends
        the request without a token.
        """

        path = normalize_path(path)
        req = self.session.build_request(method, path, headers=headers, params=params, **kwargs)
        response = await self.session.send(req, auth=auth)

        content: Union[str, Dict[str, Any]]
        if response.headers.get("Content-Type", "").startswith("application/json"):
            try:
                content = response.json()
            except ValueError:
                content = response.text
            if not isinstance(content, (dict, str)):
                content = response.text
        else:
            content = response.text

        result = Response(
            method=method,
            url=path,
            status=response.status_code,
            content=content,
            headers=dict(response.headers.items()),
        )
        if raise_exception:
            result.raise_for_error()

        return result
