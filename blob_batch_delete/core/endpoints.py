"""Storage account endpoint resolution."""

from __future__ import annotations

DEFAULT_BLOB_ENDPOINT_TEMPLATE = "https://{account}.blob.core.windows.net"


def resolve_endpoint(account: str) -> str:
    """Resolve the blob service URL for an account identifier.

    A value that already carries a scheme is used as-is, a host name gets an
    ``https://`` prefix, and a bare account name maps to the public cloud
    blob endpoint.
    """
    trimmed = account.strip()
    if "://" in trimmed:
        return trimmed
    if "." in trimmed:
        return f"https://{trimmed}"
    return DEFAULT_BLOB_ENDPOINT_TEMPLATE.format(account=trimmed)
