from .resolver import (
    AUTH_ENDPOINT_KEY,
    TRANSFER_ENDPOINT_KEY,
    Directory,
    EndpointResolver,
    directory_url,
)

__all__ = [
    "AUTH_ENDPOINT_KEY",
    "TRANSFER_ENDPOINT_KEY",
    "Directory",
    "EndpointResolver",
    "directory_url",
]
