from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO, Protocol

from accounts.services._shared.errors import MediaDeleteError, MediaUploadError


@dataclass(frozen=True, slots=True)
class MediaFile:
    """
    File received from the client, not yet uploaded.

    :param field: Form field name (``avatar``, ``coverImage``).
    :param filename: Client-supplied file name.
    :param stream: Readable binary stream with the file content.
    :param content_type: MIME type announced by the client.
    """

    field: str
    filename: str
    stream: BinaryIO
    content_type: str | None = None


@dataclass(frozen=True, slots=True)
class UploadedMedia:
    """
    Stored asset on the media host.

    :param url: Stable HTTPS URL of the asset.
    :param public_id: Host-side identifier used for deletion.
    """

    url: str
    public_id: str


class MediaUploader(Protocol):
    """Port for the remote object store holding avatars and cover images.

    ``upload`` raises :class:`MediaUploadError` and ``delete`` raises
    :class:`MediaDeleteError`; neither returns a sentinel on failure.
    """

    def upload(self, media: MediaFile) -> UploadedMedia: ...

    def delete(self, url: str) -> None: ...


@dataclass(slots=True)
class InMemoryMediaUploader(MediaUploader):
    """Media host double keeping assets in a dict (tests, local runs).

    Set ``fail_uploads`` / ``fail_deletes`` to a set of form fields / URLs
    (or ``"*"``) to simulate host failures.
    """

    base_url: str = "https://media.test/upload"
    assets: dict[str, bytes] = field(default_factory=dict)
    deleted: list[str] = field(default_factory=list)
    fail_uploads: set[str] = field(default_factory=set)
    fail_deletes: set[str] = field(default_factory=set)
    _seq: int = 0

    def upload(self, media: MediaFile) -> UploadedMedia:
        if "*" in self.fail_uploads or media.field in self.fail_uploads:
            raise MediaUploadError(media.field, "simulated upload failure")
        self._seq += 1
        public_id = f"{media.field}-{self._seq}"
        url = f"{self.base_url}/v1/{public_id}.bin"
        self.assets[url] = media.stream.read()
        return UploadedMedia(url=url, public_id=public_id)

    def delete(self, url: str) -> None:
        if "*" in self.fail_deletes or url in self.fail_deletes:
            raise MediaDeleteError(url, "simulated delete failure")
        self.assets.pop(url, None)
        self.deleted.append(url)
