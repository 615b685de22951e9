import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from ._utils import validate_mount_path


class MountsConfig(BaseModel):
    kv: str = "secret"
    database: str = "database"
    app_role: str = "approle"

    @field_validator("kv", "database", "app_role")
    @classmethod
    def _validate_mount(cls, v: str) -> str:
        return validate_mount_path(v)


class Config(BaseModel):
    address: str = Field(default_factory=lambda: os.getenv("VAULT_ADDR", "http://127.0.0.1:8200"))
    timeout: Optional[int] = None
    namespace: Optional[str] = None
    auth_method: str = "token"
    auth_params: Dict[str, Any] = Field(default_factory=dict)
    scheme: str = "vault"
    mounts: MountsConfig = Field(default_factory=MountsConfig)

    @field_validator("address")
    @classmethod
    def _strip_address(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def api_url(self) -> str:
        return self.address + "/v1"
