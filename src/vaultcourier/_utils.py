import re
from typing import Any, Iterable, Mapping, MutableMapping, Optional

import vaultcourier.errors as errors

RESERVED_MOUNTS = ("sys", "auth", "identity", "cubbyhole")

_SEGMENT = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9_.-]*$")


def raise_for_error(method: str, url: str, status_code: int, errors_list: Optional[Iterable[str]] = None):
    """Helper method to raise exceptions based on the status code of a response received back from Vault."""

    errs = list(errors_list or [])
    message = ", ".join(errs) or f"operation failed with {status_code}"

    if status_code == 400:
        raise errors.BadRequest(message, errors=errs, method=method, url=url)
    elif status_code == 401:
        raise errors.Unauthorized(message, errors=errs, method=method, url=url)
    elif status_code == 403:
        raise errors.Forbidden(message, errors=errs, method=method, url=url)
    elif status_code == 404:
        raise errors.InvalidPath(message, errors=errs, method=method, url=url)
    elif status_code == 405:
        raise errors.UnsupportedOperation(message, errors=errs, method=method, url=url)
    elif status_code == 429:
        raise errors.RateLimitExceeded(message, errors=errs, method=method, url=url)
    elif status_code == 500:
        raise errors.InternalServerError(message, errors=errs, method=method, url=url)
    elif status_code == 501:
        raise errors.VaultNotInitialized(message, errors=errs, method=method, url=url)
    elif status_code == 502:
        raise errors.BadGateway(message, errors=errs, method=method, url=url)
    elif status_code == 503:
        raise errors.VaultDown(message, errors=errs, method=method, url=url)
    else:
        raise errors.OperationFailed(message, errors=errs, method=method, url=url, status_code=status_code)


def remove_nones(params: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Removes None values from optional arguments in a parameter dictionary."""

    return {key: value for key, value in params.items() if value is not None}


def normalize_path(url: str) -> str:
    while "//" in url:
        url = url.replace("//", "/")
    return url


def format_url(format_str: str, *args: Any, **kwargs: Any) -> str:
    """Creates a URL using the specified format after escaping the provided arguments."""

    from urllib.parse import quote

    escaped_args = [quote(value) for value in args]
    escaped_kwargs = {key: quote(value) for key, value in kwargs.items()}
    return format_str.format(*escaped_args, **escaped_kwargs)


def strip_slashes(path: str) -> str:
    return normalize_path(path).strip("/")


def is_valid_mount_path(mount: str) -> bool:
    """Mount paths are slash separated segments without spaces or leading dots.

    Leading and trailing slashes are tolerated and dropped. System mounts are not valid
    secret engine mounts.
    """

    if not mount or "//" in mount:
        return False

    path = mount.strip("/")
    if not path:
        return False

    segments = path.split("/")
    if segments[0] in RESERVED_MOUNTS:
        return False

    return all(_SEGMENT.match(segment) for segment in segments)


def validate_mount_path(mount: str) -> str:
    if not is_valid_mount_path(mount):
        raise errors.InvalidMountPath(f"Invalid mount path: {mount!r}")
    return mount.strip("/")


def has_path_prefix(path: str, prefix: str) -> bool:
    """Segment aware, case sensitive prefix check on slash normalized paths."""

    path = strip_slashes(path)
    prefix = strip_slashes(prefix)
    return path == prefix or path.startswith(prefix + "/")
