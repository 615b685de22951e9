from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Dict, Iterable, List, Sequence, Union

import anyio

from .errors import UnsupportedURL, VaultError
from .parsers import CustomResult, DatabaseResult, KeyValueResult, ParseResult, ResourceParser, ResourceURI

if TYPE_CHECKING:
    from .vault import VaultClient

logger = logging.getLogger("vaultcourier")

READ_REFERENCE = re.compile(r"""read\(\s*(?P<quote>["'])(?P<uri>[^"']+)(?P=quote)\s*\)""")


class ResourceReader:
    """Resolves resource URIs to secret bytes through an ordered list of parsers.

    Every parser is tried in registration order and the first one that accepts the URI decides
    the secret engine call. Calls use the session token of ``client`` at the time they are made.
    """

    def __init__(
        self,
        client: VaultClient,
        parsers: Sequence[ResourceParser],
        schemes: Iterable[str] = ("vault",),
    ) -> None:
        self.client = client
        self.parsers: List[ResourceParser] = list(parsers)
        self.schemes = frozenset(schemes)

    def register(self, parser: ResourceParser) -> None:
        self.parsers.append(parser)

    def parse(self, uri: Union[str, ResourceURI]) -> ParseResult:
        resource = ResourceURI.parse(uri)
        if self.schemes and resource.scheme not in self.schemes:
            raise UnsupportedURL(f"Unsupported scheme in resource URI: {resource}")

        for parser in self.parsers:
            result = parser.parse(resource)
            if result is not None:
                logger.debug("Resource %s matched %r", resource.path, parser)
                return result

        raise UnsupportedURL(f"Reading unsupported vault engine or path: {resource.path}")

    async def read(self, uri: Union[str, ResourceURI]) -> bytes:
        resource = ResourceURI.parse(uri)
        result = self.parse(resource)

        if isinstance(result, KeyValueResult):
            return await self.client.read_kv_secret_data(result.mount, result.key, result.version)
        elif isinstance(result, DatabaseResult):
            return await self.client.read_database_credentials_data(result.mount, result.role)
        elif isinstance(result, CustomResult):
            if result.payload is not None:
                return result.payload
            if result.action is not None:
                return await result.action(self.client, resource)

        raise UnsupportedURL(f"No reader for resource {resource.path}")

    async def resolve(self, document: str) -> str:
        """Substitutes every ``read("scheme:...")`` reference in ``document`` with the secret's text.

        Each distinct URI is read once. Reads run concurrently; the first failure cancels the
        rest. Vault errors are raised as the first typed error, chained to the group.
        """

        uris = list(dict.fromkeys(m.group("uri") for m in READ_REFERENCE.finditer(document)))
        if not uris:
            return document

        resolved: Dict[str, str] = {}

        async def resolve_one(uri: str) -> None:
            resolved[uri] = (await self.read(uri)).decode("utf-8")

        try:
            async with anyio.create_task_group() as tg:
                for uri in uris:
                    tg.start_soon(resolve_one, uri)
        except ExceptionGroup as group:
            vault_errors, rest = group.split(VaultError)
            if rest is None:
                raise _first_error(vault_errors) from group
            if vault_errors is None and len(group.exceptions) == 1:
                raise group.exceptions[0] from None
            raise

        return READ_REFERENCE.sub(lambda m: resolved[m.group("uri")], document)


def _first_error(group: BaseExceptionGroup) -> BaseException:
    error = group.exceptions[0]
    return _first_error(error) if isinstance(error, BaseExceptionGroup) else error
