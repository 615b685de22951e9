"""Settings source filled from Vault secrets."""

import pytest
from helpers import ADDRESS, vault_response
from pydantic import BaseModel, Field

from vaultcourier import Config, CustomResourceParser, DecodingFailed, VaultSource


class Settings(BaseModel):
    api_key: str = Field(json_schema_extra={"vault": "apiKey"})
    username: str = Field(json_schema_extra={"vault": ["database/user", "db/username"]})
    region: str = "local"
    timeout: int = 30


def make_source(*uris, **kwargs):
    config = Config(address=ADDRESS, auth_params={"token": "hvs.settings"})
    return VaultSource(vault_config=config, vault_uri=list(uris), **kwargs)


async def test_load_merges_secrets(vault_api) -> None:
    first = vault_api.get("/secret/data/app/common").mock(
        return_value=vault_response({"data": {"apiKey": "abc", "Region": "eu-west-1", "db": {"username": "old"}}})
    )
    vault_api.get("/secret/data/app/prod").mock(
        return_value=vault_response({"data": {"Region": "us-east-1", "db": {"username": "app"}}})
    )
    source = make_source("vault:/secret/app/common", "vault:/secret/app/prod")

    values = await source.load(Settings)

    assert values == {"api_key": "abc", "username": "app", "region": "us-east-1"}
    assert Settings(**values).timeout == 30
    assert first.calls.last.request.headers["X-Vault-Token"] == "hvs.settings"


async def test_load_case_sensitive(vault_api) -> None:
    vault_api.get("/secret/data/app").mock(return_value=vault_response({"data": {"apiKey": "abc", "Region": "eu"}}))
    source = make_source("vault:/secret/app", case_sensitive=True)

    values = await source.load(Settings)

    assert values == {"api_key": "abc"}


async def test_load_without_uris(vault_api) -> None:
    assert await make_source().load(Settings) == {}
    assert vault_api.calls.call_count == 0


async def test_load_rejects_non_object_secret(vault_api) -> None:
    source = make_source("vault:/fixed/list", parsers=[CustomResourceParser(lambda uri: b"[1, 2]")])
    with pytest.raises(DecodingFailed):
        await source.load(Settings)


def test_call_runs_load(vault_api) -> None:
    vault_api.get("/secret/data/app").mock(
        return_value=vault_response({"data": {"apikey": "abc", "database": {"user": "svc"}}})
    )
    values = make_source("vault:/secret/app")(Settings)
    assert values == {"api_key": "abc", "username": "svc"}
