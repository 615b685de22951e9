"""Resource URI parsing for the key/value, database and custom parsers."""

import pytest

from vaultcourier import (
    CustomResourceParser,
    CustomResult,
    DatabaseReaderParser,
    DatabaseResult,
    DynamicRole,
    InvalidArgument,
    InvalidMountPath,
    KeyValueDataPathParser,
    KeyValueReaderParser,
    KeyValueResult,
    ResourceURI,
    StaticRole,
)


def parse(parser, uri):
    return parser.parse(ResourceURI.parse(uri))


def test_resource_uri() -> None:
    uri = ResourceURI.parse("vault:/secret/dev-secret?version=2")
    assert uri.scheme == "vault"
    assert uri.path == "/secret/dev-secret"
    assert uri.relative_path == "secret/dev-secret"
    assert uri.version == 2
    assert str(uri) == "vault:/secret/dev-secret?version=2"


def test_resource_uri_with_authority() -> None:
    uri = ResourceURI.parse("vault://secret/dev-secret")
    assert uri.path == "/secret/dev-secret"


@pytest.mark.parametrize("query", ["", "?version=", "?other=1"])
def test_resource_uri_without_version(query) -> None:
    assert ResourceURI.parse("vault:/secret/dev-secret" + query).version is None


def test_resource_uri_invalid_version() -> None:
    with pytest.raises(InvalidArgument):
        ResourceURI.parse("vault:/secret/dev-secret?version=latest").version


def test_resource_uri_hides_token() -> None:
    uri = ResourceURI.parse("vault:/sys/wrapping/unwrap?version=abc&token=hvs.wrapping")
    assert uri.query["token"] == "hvs.wrapping"
    assert "hvs.wrapping" not in str(uri)
    with pytest.raises(InvalidArgument) as exc_info:
        uri.version
    assert "hvs.wrapping" not in str(exc_info.value)


@pytest.mark.parametrize(
    "uri, expected",
    [
        ("vault:/secret/dev-secret", KeyValueResult(mount="secret", key="dev-secret")),
        ("vault:/secret/dev-secret?version=2", KeyValueResult(mount="secret", key="dev-secret", version=2)),
        ("vault:/secret/app/db/", KeyValueResult(mount="secret", key="app/db")),
        ("vault://secret/dev-secret", KeyValueResult(mount="secret", key="dev-secret")),
    ],
)
def test_key_value_reader(uri, expected) -> None:
    assert parse(KeyValueReaderParser("secret"), uri) == expected


@pytest.mark.parametrize(
    "uri",
    [
        "vault:/other/dev-secret",
        "vault:/secretive/dev-secret",
        "vault:/secret",
        "vault:/secret/",
        "vault:/Secret/dev-secret",
    ],
)
def test_key_value_reader_no_match(uri) -> None:
    assert parse(KeyValueReaderParser("secret"), uri) is None


def test_key_value_reader_nested_mount() -> None:
    parser = KeyValueReaderParser("/teams/payments/")
    assert parser.mount == "teams/payments"
    assert parse(parser, "vault:/teams/payments/stripe") == KeyValueResult(mount="teams/payments", key="stripe")
    assert parse(parser, "vault:/teams/stripe") is None


@pytest.mark.parametrize(
    "parser, uri, expected",
    [
        (KeyValueDataPathParser("secret"), "vault:/secret/data/dev-secret", KeyValueResult(mount="secret", key="dev-secret")),
        (
            KeyValueDataPathParser("secret"),
            "vault:/secret/data/dev-secret?version=3",
            KeyValueResult(mount="secret", key="dev-secret", version=3),
        ),
        (KeyValueDataPathParser(), "vault:/kv/apps/data/web/api", KeyValueResult(mount="kv/apps", key="web/api")),
    ],
)
def test_key_value_data_path(parser, uri, expected) -> None:
    assert parse(parser, uri) == expected


@pytest.mark.parametrize(
    "uri",
    ["vault:/secret/dev-secret", "vault:/secret/data/", "vault:/other/data/dev-secret", "vault:/data/dev-secret"],
)
def test_key_value_data_path_no_match(uri) -> None:
    assert parse(KeyValueDataPathParser("secret"), uri) is None


def test_database_static_role() -> None:
    parser = DatabaseReaderParser("database")
    result = parse(parser, "vault:/database/static-creds/test_static_role")
    assert result == DatabaseResult(mount="database", role=StaticRole(name="test_static_role"))
    assert isinstance(result.role, StaticRole)


def test_database_dynamic_role() -> None:
    result = parse(DatabaseReaderParser("database"), "vault:/database/creds/readonly")
    assert result == DatabaseResult(mount="database", role=DynamicRole(name="readonly"))
    assert isinstance(result.role, DynamicRole)


@pytest.mark.parametrize(
    "uri",
    [
        "vault:/database/config/postgres",
        "vault:/database/static-creds",
        "vault:/database/creds/",
        "vault:/other/creds/readonly",
        "vault:/database",
    ],
)
def test_database_no_match(uri) -> None:
    assert parse(DatabaseReaderParser("database"), uri) is None


@pytest.mark.parametrize("uri", ["vault:/database/static-creds/a", "vault:/database/creds/a"])
def test_database_role_is_static_or_dynamic(uri) -> None:
    role = parse(DatabaseReaderParser("database"), uri).role
    assert isinstance(role, StaticRole) != isinstance(role, DynamicRole)


@pytest.mark.parametrize("mount", ["", "/", "sys", "auth/approle", "bad mount", "../secret", "a//b", ".hidden"])
def test_invalid_mount(mount) -> None:
    with pytest.raises(InvalidMountPath):
        KeyValueReaderParser(mount)
    with pytest.raises(InvalidMountPath):
        DatabaseReaderParser(mount)


def test_custom_parser_payload() -> None:
    parser = CustomResourceParser(lambda uri: b"static" if uri.relative_path == "fixed/value" else None)
    assert parse(parser, "vault:/fixed/value") == CustomResult(payload=b"static")
    assert parse(parser, "vault:/fixed/other") is None


def test_unwrap_parser() -> None:
    parser = CustomResourceParser.unwrap()
    result = parse(parser, "vault:/sys/wrapping/unwrap?token=hvs.wrapping")
    assert isinstance(result, CustomResult)
    assert result.payload is None
    assert callable(result.action)

    assert parse(parser, "vault:/sys/wrapping/unwrap") is None
    assert parse(parser, "vault:/sys/wrapping/lookup?token=hvs.wrapping") is None
