import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationError

from ._client import Client
from ._utils import format_url, validate_mount_path
from .errors import DecodingFailed

logger = logging.getLogger("vaultcourier")


class KeyValueMetadata(BaseModel):
    created_time: datetime
    version: int
    destroyed: bool = False
    deletion_time: str = ""
    custom_metadata: Optional[Dict[str, str]] = None


def encode_secret(data: Dict[str, Any]) -> bytes:
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


class KeyValueClient:
    """Key/value version 2 secret engine."""

    def __init__(self, client: Client) -> None:
        self._client = client

    async def write(self, mount: str, key: str, data: Dict[str, Any]) -> KeyValueMetadata:
        mount = validate_mount_path(mount)
        api_path = format_url("/{mount}/data/{key}", mount=mount, key=key.strip("/"))
        logger.debug("Writing secret at %s", api_path)

        response = await self._client.post(api_path, json={"data": data})
        try:
            return KeyValueMetadata.model_validate(response.data)
        except ValidationError as e:
            raise DecodingFailed("Unexpected key/value write payload", method="post", url=api_path) from e

    async def read(self, mount: str, key: str, version: Optional[int] = None) -> Dict[str, Any]:
        """Reads the secret's data. A missing ``version`` reads the latest."""

        mount = validate_mount_path(mount)
        api_path = format_url("/{mount}/data/{key}", mount=mount, key=key.strip("/"))
        params = {"version": version} if version is not None else None
        logger.debug("Reading secret at %s", api_path)

        response = await self._client.get(api_path, params=params)
        secret = response.data.get("data")
        if not isinstance(secret, dict):
            raise DecodingFailed("Key/value response is missing data", method="get", url=api_path)
        return secret

    async def read_data(self, mount: str, key: str, version: Optional[int] = None) -> bytes:
        return encode_secret(await self.read(mount, key, version))
