"""
accounts.services._shared.ports
===============================

Ports (hexagonal interfaces) the service layer depends on.

Modules
-------
- :mod:`token_provider`:
    :class:`~.TokenProvider`, the abstraction for signing and verifying
    access/refresh tokens, plus :class:`~.StubTokenProvider` for unit tests.

- :mod:`media_store`:
    :class:`~.MediaUploader`, the abstraction for the remote media host,
    its value objects and :class:`~.InMemoryMediaUploader`.

Concrete adapters live under ``accounts.infra``.
"""

from __future__ import annotations

from .media_store import InMemoryMediaUploader, MediaFile, MediaUploader, UploadedMedia
from .token_provider import StubTokenProvider, TokenProvider

__all__ = [
    "TokenProvider",
    "StubTokenProvider",
    "MediaUploader",
    "MediaFile",
    "UploadedMedia",
    "InMemoryMediaUploader",
]
