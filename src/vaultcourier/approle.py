import logging
from typing import Any, Dict, List, Optional, Union

from ._client import AuthResult, Client
from ._utils import format_url, remove_nones, validate_mount_path
from .errors import DecodingFailed
from .wrapping import SecretIdResponse, WrappedResponse, format_ttl

logger = logging.getLogger("vaultcourier")


class AppRoleClient:
    """AppRole auth method endpoints mounted at ``auth/<mount>``."""

    def __init__(self, client: Client, mount: str = "approle") -> None:
        self._client = client
        self.mount = validate_mount_path(mount)

    async def role_id(self, name: str) -> str:
        api_path = format_url("/auth/{mount}/role/{name}/role-id", mount=self.mount, name=name)
        response = await self._client.get(api_path)
        role_id = response.data.get("role_id")
        if not isinstance(role_id, str):
            raise DecodingFailed("Response is missing role_id", method="get", url=api_path)
        return role_id

    async def generate_secret_id(
        self,
        name: str,
        *,
        wrap_ttl: Union[int, str, None] = None,
        metadata: Optional[Dict[str, Any]] = None,
        cidr_list: Optional[List[str]] = None,
        num_uses: Optional[int] = None,
        ttl: Optional[str] = None,
    ) -> Union[SecretIdResponse, WrappedResponse]:
        """Generates a new secret ID for the role.

        With ``wrap_ttl`` the secret ID comes back response-wrapped. Each call mints a new
        secret ID on the server, so a call that timed out must not be blindly repeated.
        """

        api_path = format_url("/auth/{mount}/role/{name}/secret-id", mount=self.mount, name=name)
        headers = {"X-Vault-Wrap-TTL": format_ttl(wrap_ttl)} if wrap_ttl is not None else None
        params = remove_nones(
            {
                "metadata": metadata,
                "cidr_list": cidr_list,
                "num_uses": num_uses,
                "ttl": ttl,
            }
        )
        response = await self._client.post(api_path, headers=headers, json=params)

        record = response.record
        if record.wrap_info is not None:
            return WrappedResponse.from_record(record)
        if "secret_id" in record.data:
            return SecretIdResponse.model_validate(dict(record.data, request_id=record.request_id))

        logger.debug("Unknown body in response of %s", api_path)
        raise DecodingFailed("Response contains neither a secret_id nor wrap_info", method="post", url=api_path)

    async def login(self, role_id: str, secret_id: str) -> AuthResult:
        api_path = format_url("/auth/{mount}/login", mount=self.mount)
        response = await self._client.post(
            api_path,
            json={"role_id": role_id, "secret_id": secret_id},
            auth=None,
        )
        auth = response.auth
        if auth is None:
            raise DecodingFailed("Login response is missing auth", method="post", url=api_path)
        return auth
