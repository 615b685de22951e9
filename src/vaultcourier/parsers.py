"""Resource URI parsers.

A parser turns a resource URI such as ``vault:/secret/api-keys?version=2`` into the
parameters of one secret engine call, or returns ``None`` when the URI is not its kind.
Parsing is pure; readers try parsers in registration order and the first match wins.
"""
from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional, Union
from urllib.parse import parse_qsl, unquote, urlsplit

from pydantic import BaseModel, ConfigDict, Field

from ._utils import has_path_prefix, strip_slashes, validate_mount_path
from .database import DatabaseRole, DynamicRole, StaticRole
from .errors import InvalidArgument
from .kv import encode_secret

if TYPE_CHECKING:
    from .vault import VaultClient

VaultAction = Callable[["VaultClient", "ResourceURI"], Awaitable[bytes]]

REDACTED = "<redacted>"
SECRET_QUERY_KEYS = frozenset({"token"})


class ResourceURI(BaseModel, frozen=True):
    scheme: str = ""
    path: str
    query: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def parse(cls, uri: Union[str, ResourceURI]) -> ResourceURI:
        if isinstance(uri, ResourceURI):
            return uri

        parts = urlsplit(uri)
        path = unquote(parts.path)
        if parts.netloc:
            path = "/" + parts.netloc + path
        return cls(
            scheme=parts.scheme,
            path=path,
            query=dict(parse_qsl(parts.query, keep_blank_values=True)),
        )

    @property
    def relative_path(self) -> str:
        return strip_slashes(self.path)

    @property
    def version(self) -> Optional[int]:
        """Secret version from the query, ``None`` meaning latest."""

        value = self.query.get("version")
        if value is None or value == "":
            return None
        try:
            return int(value)
        except ValueError:
            raise InvalidArgument(f"Invalid secret version {value!r} in {self}") from None

    def __str__(self) -> str:
        uri = f"{self.scheme}:{self.path}" if self.scheme else self.path
        if self.query:
            uri += "?" + "&".join(f"{k}={REDACTED if k in SECRET_QUERY_KEYS else v}" for k, v in self.query.items())
        return uri


class KeyValueResult(BaseModel, frozen=True):
    mount: str
    key: str
    version: Optional[int] = None


class DatabaseResult(BaseModel, frozen=True):
    mount: str
    role: DatabaseRole


class CustomResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    payload: Optional[bytes] = None
    action: Optional[Any] = None


ParseResult = Union[KeyValueResult, DatabaseResult, CustomResult]


class ResourceParser(abc.ABC):
    @abc.abstractmethod
    def parse(self, uri: ResourceURI) -> Optional[ParseResult]:
        ...


class KeyValueReaderParser(ResourceParser):
    """Matches ``scheme:/<mount>/<key>[?version=<int>]``."""

    def __init__(self, mount: str) -> None:
        self.mount = validate_mount_path(mount)

    def parse(self, uri: ResourceURI) -> Optional[KeyValueResult]:
        if not has_path_prefix(uri.path, self.mount):
            return None

        key = uri.relative_path[len(self.mount) :].strip("/")
        if not key:
            return None

        return KeyValueResult(mount=self.mount, key=key, version=uri.version)

    def __repr__(self) -> str:
        return f"KeyValueReaderParser(mount={self.mount!r})"


class KeyValueDataPathParser(ResourceParser):
    """Matches the API form ``scheme:/<mount>/data/<key>[?version=<int>]``.

    Splits on the first ``data`` segment. Without a ``mount``, whatever precedes it is the mount.
    """

    def __init__(self, mount: Optional[str] = None) -> None:
        self.mount = validate_mount_path(mount) if mount is not None else None

    def parse(self, uri: ResourceURI) -> Optional[KeyValueResult]:
        path = uri.relative_path
        mount, sep, key = path.partition("/data/")
        if not sep or not mount or not key.strip("/"):
            return None
        if self.mount is not None and mount != self.mount:
            return None

        return KeyValueResult(mount=mount, key=key.strip("/"), version=uri.version)

    def __repr__(self) -> str:
        return f"KeyValueDataPathParser(mount={self.mount!r})"


class DatabaseReaderParser(ResourceParser):
    """Matches ``scheme:/<mount>/static-creds/<role>`` and ``scheme:/<mount>/creds/<role>``."""

    def __init__(self, mount: str) -> None:
        self.mount = validate_mount_path(mount)

    def parse(self, uri: ResourceURI) -> Optional[DatabaseResult]:
        if not has_path_prefix(uri.path, self.mount):
            return None

        suffix = uri.relative_path[len(self.mount) :].strip("/")
        endpoint, _, name = suffix.partition("/")
        if not name:
            return None

        role: DatabaseRole
        if endpoint == "static-creds":
            role = StaticRole(name=name)
        elif endpoint == "creds":
            role = DynamicRole(name=name)
        else:
            return None

        return DatabaseResult(mount=self.mount, role=role)

    def __repr__(self) -> str:
        return f"DatabaseReaderParser(mount={self.mount!r})"


class CustomResourceParser(ResourceParser):
    """Extension point for resources outside the key/value and database shapes.

    ``resolve`` receives the URI and returns the resource's bytes, an async action
    ``(client, uri) -> bytes`` for the reader to run, or ``None`` when the URI is not its kind.
    """

    def __init__(self, resolve: Callable[[ResourceURI], Union[bytes, VaultAction, None]]) -> None:
        self._resolve = resolve

    def parse(self, uri: ResourceURI) -> Optional[CustomResult]:
        resolved = self._resolve(uri)
        if resolved is None:
            return None
        if isinstance(resolved, (bytes, bytearray)):
            return CustomResult(payload=bytes(resolved))
        return CustomResult(action=resolved)

    @classmethod
    def unwrap(cls, path: str = "sys/wrapping/unwrap") -> CustomResourceParser:
        """Resolves ``scheme:/sys/wrapping/unwrap?token=<wrapping token>`` to the unwrapped data as JSON."""

        def resolve(uri: ResourceURI) -> Optional[VaultAction]:
            token = uri.query.get("token")
            if not token or uri.relative_path != strip_slashes(path):
                return None

            async def unwrap(client: VaultClient, uri: ResourceURI) -> bytes:
                record = await client.unwrap(token)
                return encode_secret(record.data)

            return unwrap

        return cls(resolve)
