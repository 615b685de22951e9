import json
import os
from typing import Any, Dict, Iterable, List, Optional, Sequence, Type, Union

import anyio
import dpath
from pydantic import BaseModel
from pydantic.fields import FieldInfo

from .config import Config
from .errors import DecodingFailed
from .parsers import ResourceParser
from .vault import VaultClient


class VaultSource:
    """Settings source that fills model fields from secrets behind resource URIs.

    The JSON objects read from ``vault_uri`` are deep-merged in order, later URIs winning. A
    field is looked up by ``json_schema_extra={"vault": "path/in/secret"}`` or by its name.
    """

    config: Config
    uris: List[str]
    case_sensitive: bool

    def __init__(
        self,
        *,
        case_sensitive: bool = False,
        vault_address: Optional[str] = None,
        vault_auth_method: Optional[str] = None,
        vault_auth_params: Optional[Dict[str, Any]] = None,
        vault_timeout: Optional[int] = None,
        vault_config: Optional[Config] = None,
        vault_uri: Union[str, Iterable[str], None] = None,
        parsers: Optional[Sequence[ResourceParser]] = None,
    ) -> None:
        self.case_sensitive = case_sensitive
        self.config = vault_config or Config(
            address=vault_address or os.getenv("VAULT_ADDR", "http://127.0.0.1:8200"),
            timeout=vault_timeout,
            auth_method=vault_auth_method or "token",
            auth_params=vault_auth_params or {},
        )
        self.uris = [vault_uri] if isinstance(vault_uri, str) else list(vault_uri or [])
        self.parsers = parsers

    async def load(self, model: Type[BaseModel]) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if not self.uris:
            return result

        def xform(value: str) -> str:
            return value if self.case_sensitive else value.lower()

        secret: Dict[str, Any] = {}
        async with VaultClient(self.config) as vault:
            await vault.login()
            reader = vault.make_resource_reader(self.parsers)
            for uri in self.uris:
                data = json.loads(await reader.read(uri))
                if not isinstance(data, dict):
                    raise DecodingFailed(f"Secret at {uri} is not a JSON object")
                dpath.merge(secret, data if self.case_sensitive else _lower_keys(data))

        for name, field in model.model_fields.items():
            for source_name in map(xform, _get_source_names(name, field, "vault")):
                if (value := dpath.get(secret, source_name, separator="/", default=None)) is not None:
                    result[field.alias or name] = value
                    break

        return result

    def __call__(self, model: Type[BaseModel]) -> Dict[str, Any]:
        return anyio.run(self.load, model)

    def __repr__(self) -> str:
        return f"VaultSource(uri={self.uris!r}, config={self.config!r})"


def _lower_keys(data: Any) -> Any:
    if isinstance(data, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in data.items()}
    return data


def _get_source_names(name: str, field: FieldInfo, extra: str) -> List[str]:
    extras = field.json_schema_extra if isinstance(field.json_schema_extra, dict) else {}
    source_names: Union[str, Iterable[str]] = extras.get(extra, name)  # type: ignore[assignment]
    if isinstance(source_names, str):
        source_names = [source_names]
    else:
        source_names = list(source_names)
    return source_names
