import logging
from typing import Union

from pydantic import BaseModel, ValidationError

from ._client import Client
from ._utils import format_url, validate_mount_path
from .errors import DecodingFailed

logger = logging.getLogger("vaultcourier")


class StaticRole(BaseModel, frozen=True):
    name: str


class DynamicRole(BaseModel, frozen=True):
    name: str


DatabaseRole = Union[StaticRole, DynamicRole]


class DatabaseCredentials(BaseModel):
    username: str
    password: str

    def __repr__(self) -> str:
        return f"DatabaseCredentials(username={self.username!r}, password=<REDACTED>)"

    def __str__(self) -> str:
        return f"username={self.username}, password=<REDACTED>"


class DatabaseClient:
    """Database secret engine credential endpoints."""

    def __init__(self, client: Client) -> None:
        self._client = client

    async def credentials(self, mount: str, role: DatabaseRole) -> DatabaseCredentials:
        mount = validate_mount_path(mount)
        if isinstance(role, StaticRole):
            api_path = format_url("/{mount}/static-creds/{name}", mount=mount, name=role.name)
        else:
            api_path = format_url("/{mount}/creds/{name}", mount=mount, name=role.name)
        logger.debug("Reading credentials at %s", api_path)

        response = await self._client.get(api_path)
        try:
            return DatabaseCredentials.model_validate(response.data)
        except ValidationError as e:
            raise DecodingFailed("Unexpected database credentials payload", method="get", url=api_path) from e

    async def read_data(self, mount: str, role: DatabaseRole) -> bytes:
        credentials = await self.credentials(mount, role)
        return credentials.model_dump_json().encode("utf-8")
