import pytest
import respx
from helpers import ADDRESS, API_URL, ROOT_TOKEN

from vaultcourier import Config, TokenMethod, VaultClient


@pytest.fixture
def vault_api():
    with respx.mock(base_url=API_URL, assert_all_called=False) as router:
        yield router


@pytest.fixture
async def vault():
    client = VaultClient(Config(address=ADDRESS))
    yield client
    await client.aclose()


@pytest.fixture
async def logged_in(vault):
    await vault.login(TokenMethod(token=ROOT_TOKEN))
    return vault
