from ._auth import AppRoleMethod, AuthMethod, TokenMethod
from ._client import AuthResult, Record
from ._session import SessionTokenStore
from .config import Config, MountsConfig
from .database import DatabaseCredentials, DynamicRole, StaticRole
from .errors import (
    BadGateway,
    BadRequest,
    ClientError,
    DecodingFailed,
    Forbidden,
    InternalServerError,
    InvalidArgument,
    InvalidMountPath,
    InvalidPath,
    NotAuthenticated,
    OperationFailed,
    RateLimitExceeded,
    ServerError,
    Unauthorized,
    UnsupportedOperation,
    UnsupportedReturnType,
    UnsupportedURL,
    VaultDown,
    VaultError,
    VaultNotInitialized,
)
from .parsers import (
    CustomResourceParser,
    CustomResult,
    DatabaseReaderParser,
    DatabaseResult,
    KeyValueDataPathParser,
    KeyValueReaderParser,
    KeyValueResult,
    ResourceParser,
    ResourceURI,
)
from .provider import ConfigKey, ConfigType, ConfigValue, LookupResult, SecretEngine, VaultProvider
from .reader import ResourceReader
from .source import VaultSource
from .vault import VaultClient, get_secret
from .wrapping import SecretIdResponse, WrappedResponse, WrappedTokenInfo

__all__ = [
    "AppRoleMethod",
    "AuthMethod",
    "AuthResult",
    "BadGateway",
    "BadRequest",
    "ClientError",
    "Config",
    "ConfigKey",
    "ConfigType",
    "ConfigValue",
    "CustomResourceParser",
    "CustomResult",
    "DatabaseCredentials",
    "DatabaseReaderParser",
    "DatabaseResult",
    "DecodingFailed",
    "DynamicRole",
    "Forbidden",
    "InternalServerError",
    "InvalidArgument",
    "InvalidMountPath",
    "InvalidPath",
    "KeyValueDataPathParser",
    "KeyValueReaderParser",
    "KeyValueResult",
    "LookupResult",
    "MountsConfig",
    "NotAuthenticated",
    "OperationFailed",
    "RateLimitExceeded",
    "Record",
    "ResourceParser",
    "ResourceReader",
    "ResourceURI",
    "SecretEngine",
    "SecretIdResponse",
    "ServerError",
    "SessionTokenStore",
    "StaticRole",
    "TokenMethod",
    "Unauthorized",
    "UnsupportedOperation",
    "UnsupportedReturnType",
    "UnsupportedURL",
    "VaultClient",
    "VaultDown",
    "VaultError",
    "VaultNotInitialized",
    "VaultProvider",
    "VaultSource",
    "WrappedResponse",
    "WrappedTokenInfo",
    "get_secret",
]
