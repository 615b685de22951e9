"""Configuration provider backed by Vault secrets.

Lookups are keyed by the key components plus a context naming the secret engine, its mount
and the secret's URL. A secret is fetched on first access and then served from memory.
"""
from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Tuple, Union
from urllib.parse import urlsplit

from pydantic import BaseModel, Field

from .errors import DecodingFailed, InvalidArgument, UnsupportedReturnType, UnsupportedURL
from .parsers import DatabaseReaderParser, KeyValueDataPathParser, KeyValueReaderParser, ResourceURI

if TYPE_CHECKING:
    from .reader import ResourceReader
    from .vault import VaultClient

logger = logging.getLogger("vaultcourier")


class SecretEngine(str, enum.Enum):
    KEY_VALUE = "keyValue"
    DATABASE = "database"
    CUSTOM = "custom"


class ConfigType(str, enum.Enum):
    STRING = "string"
    BYTES = "bytes"
    INT = "int"
    DOUBLE = "double"
    BOOL = "bool"
    STRING_ARRAY = "stringArray"
    INT_ARRAY = "intArray"
    DOUBLE_ARRAY = "doubleArray"
    BOOL_ARRAY = "boolArray"
    BYTE_CHUNK_ARRAY = "byteChunkArray"


SECRET_TYPES = (ConfigType.STRING, ConfigType.BYTES)


class ConfigKey(BaseModel, frozen=True):
    components: Tuple[str, ...]
    context: Dict[str, str] = Field(default_factory=dict)

    @property
    def encoded(self) -> str:
        return ".".join(self.components)

    @property
    def cache_key(self) -> Tuple[Tuple[str, ...], Tuple[Tuple[str, str], ...]]:
        return self.components, tuple(sorted(self.context.items()))

    def __hash__(self) -> int:
        return hash(self.cache_key)


class ConfigValue(BaseModel):
    content: Union[str, bytes]
    is_secret: bool = True

    def __repr__(self) -> str:
        if self.is_secret:
            return "ConfigValue(content=<REDACTED>, is_secret=True)"
        return f"ConfigValue(content={self.content!r}, is_secret=False)"


class LookupResult(BaseModel):
    encoded_key: str
    value: Optional[ConfigValue] = None


class VaultProvider:
    ENGINE_CONTEXT_KEY = "engine"
    MOUNT_CONTEXT_KEY = "mount"
    URL_CONTEXT_KEY = "url"

    provider_name = "VaultProvider"

    def __init__(
        self,
        client: VaultClient,
        reader: Optional[ResourceReader] = None,
        initial_values: Optional[Mapping[ConfigKey, ConfigValue]] = None,
    ) -> None:
        self.client = client
        self.reader = reader
        self._cache: Dict[Any, ConfigValue] = {}
        for key, value in (initial_values or {}).items():
            self._cache[key.cache_key] = value

    @classmethod
    def make_context(cls, engine: Union[SecretEngine, str], mount: str, url: str) -> Dict[str, str]:
        return {
            cls.ENGINE_CONTEXT_KEY: SecretEngine(engine).value,
            cls.MOUNT_CONTEXT_KEY: mount,
            cls.URL_CONTEXT_KEY: url,
        }

    def value(self, key: ConfigKey, type: ConfigType = ConfigType.STRING) -> LookupResult:
        """Reads a value from memory only. It may be outdated, see :meth:`fetch_value`."""

        if self._is_vault_key(key):
            _check_type(key, type)
        cached = self._cache.get(key.cache_key)
        if cached is None:
            return LookupResult(encoded_key=key.encoded)
        return LookupResult(encoded_key=key.encoded, value=_convert(key, cached, type))

    async def get_value(self, key: ConfigKey, type: ConfigType = ConfigType.STRING) -> LookupResult:
        result = self.value(key, type)
        if result.value is not None:
            return result
        return await self.fetch_value(key, type)

    async def fetch_value(self, key: ConfigKey, type: ConfigType = ConfigType.STRING) -> LookupResult:
        """Fetches the secret from Vault and updates the cache.

        A key whose context lacks the engine, mount or url entries is not a Vault key and
        yields an empty result.
        """

        if not self._is_vault_key(key):
            return LookupResult(encoded_key=key.encoded)

        _check_type(key, type)
        engine = key.context[self.ENGINE_CONTEXT_KEY]
        mount = key.context[self.MOUNT_CONTEXT_KEY]

        try:
            secret_engine = SecretEngine(engine)
        except ValueError:
            raise InvalidArgument(f"Unsupported secret engine {engine!r}") from None

        resource = self._resource(key.context[self.URL_CONTEXT_KEY])

        if secret_engine is SecretEngine.CUSTOM:
            if self.reader is None:
                raise InvalidArgument("A resource reader is required for custom secrets")
            buffer = await self.reader.read(resource)
        else:
            buffer = await self._read(secret_engine, mount, resource, key)

        value = ConfigValue(content=buffer, is_secret=True)
        self._cache[key.cache_key] = value
        logger.debug("Fetched secret for config key %s", key.encoded)
        return LookupResult(encoded_key=key.encoded, value=_convert(key, value, type))

    async def _read(self, engine: SecretEngine, mount: str, resource: ResourceURI, key: ConfigKey) -> bytes:
        if engine is SecretEngine.KEY_VALUE:
            kv = KeyValueReaderParser(mount).parse(resource)
            if kv is None or kv.key.startswith("data/"):
                kv = KeyValueDataPathParser(mount).parse(resource)
            if kv is None:
                raise UnsupportedURL(f"Invalid context url {resource.path!r} in configuration {key.encoded!r}")
            return await self.client.read_kv_secret_data(kv.mount, kv.key, kv.version)

        database = DatabaseReaderParser(mount).parse(resource)
        if database is None:
            raise UnsupportedURL(f"Invalid context url {resource.path!r} in configuration {key.encoded!r}")
        return await self.client.read_database_credentials_data(database.mount, database.role)

    def _is_vault_key(self, key: ConfigKey) -> bool:
        context = key.context
        return all(k in context for k in (self.ENGINE_CONTEXT_KEY, self.MOUNT_CONTEXT_KEY, self.URL_CONTEXT_KEY))

    def _resource(self, url: str) -> ResourceURI:
        """Resolves a context url against the API base. Scheme-less urls get the configured scheme."""

        resource = ResourceURI.parse(self._relative_url(url))
        if resource.scheme:
            return resource
        return ResourceURI(scheme=self.client.config.scheme, path="/" + resource.relative_path, query=resource.query)

    def _relative_url(self, url: str) -> str:
        api_url = self.client.api_url
        if url.startswith(api_url):
            return url[len(api_url) :]
        if urlsplit(url).scheme in ("http", "https"):
            raise UnsupportedURL(f"Context url {url!r} is not under {api_url}")
        return url

    def __repr__(self) -> str:
        return f"VaultProvider[{self.client.api_url}]"


def _check_type(key: ConfigKey, type: ConfigType) -> None:
    if type not in SECRET_TYPES:
        raise UnsupportedReturnType(f"Config value for key {key.encoded!r} cannot be converted to type {type.value}")


def _convert(key: ConfigKey, value: ConfigValue, type: ConfigType) -> ConfigValue:
    content = value.content
    if type is ConfigType.STRING and isinstance(content, bytes):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodingFailed(f"Config value for key {key.encoded!r} is not UTF-8") from e
    elif type is ConfigType.BYTES and isinstance(content, str):
        content = content.encode("utf-8")
    return ConfigValue(content=content, is_secret=value.is_secret)
