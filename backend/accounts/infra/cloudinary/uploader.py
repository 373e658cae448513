# accounts/infra/cloudinary/uploader.py
from __future__ import annotations

import hashlib
import logging
import re
import time
from dataclasses import dataclass
from typing import Any

import requests

from accounts.services._shared.errors import MediaDeleteError, MediaUploadError
from accounts.services._shared.ports import MediaFile, MediaUploader, UploadedMedia

log = logging.getLogger(__name__)

API_BASE_URL = "https://api.cloudinary.com/v1_1"

# <anything>/upload/[v123/]<public_id>.<ext>
_PUBLIC_ID_RE = re.compile(r"/upload/(?:v\d+/)?(?P<public_id>.+?)(?:\.[A-Za-z0-9]+)?$")


def sign_params(params: dict[str, Any], api_secret: str) -> str:
    """
    Compute the Cloudinary request signature.

    Parameters are sorted by name, joined as ``k=v`` pairs with ``&`` and
    suffixed with the API secret; the signature is the SHA-1 hex digest.
    Empty values are left out.
    """
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params) if params[k] not in (None, ""))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode()).hexdigest()


def extract_public_id(url: str) -> str | None:
    """
    Derive the asset ``public_id`` from a delivery URL.

    ``https://res.cloudinary.com/demo/image/upload/v1712/avatars/abc.png``
    yields ``avatars/abc``. Returns ``None`` when the URL has no
    ``/upload/`` segment.
    """
    match = _PUBLIC_ID_RE.search(url or "")
    return match.group("public_id") if match else None


@dataclass(slots=True)
class CloudinaryMediaUploader(MediaUploader):
    """
    Adapter for the Cloudinary upload API.

    Calls are blocking and not retried; failures raise
    :class:`MediaUploadError` / :class:`MediaDeleteError`.
    """

    cloud_name: str
    api_key: str
    api_secret: str
    timeout: float = 30.0
    folder: str | None = None

    def _endpoint(self, resource_type: str, action: str) -> str:
        return f"{API_BASE_URL}/{self.cloud_name}/{resource_type}/{action}"

    def _signed(self, params: dict[str, Any]) -> dict[str, Any]:
        params = {k: v for k, v in params.items() if v not in (None, "")}
        params["timestamp"] = int(time.time())
        signed = dict(params)
        signed["signature"] = sign_params(params, self.api_secret)
        signed["api_key"] = self.api_key
        return signed

    def _post(self, url: str, **kwargs: Any) -> dict[str, Any]:
        resp = requests.post(url, timeout=self.timeout, **kwargs)
        resp.raise_for_status()
        body = resp.json()
        if not isinstance(body, dict):
            raise ValueError("Unexpected response body")
        return body

    def upload(self, media: MediaFile) -> UploadedMedia:
        """
        Upload ``media`` with ``resource_type=auto``.

        :raises MediaUploadError: Missing credentials, network failure,
            non-2xx reply, or a reply without URL/public id.
        """
        if not (self.cloud_name and self.api_key and self.api_secret):
            raise MediaUploadError(media.field, "media host credentials are not configured")
        try:
            body = self._post(
                self._endpoint("auto", "upload"),
                data=self._signed({"folder": self.folder}),
                files={"file": (media.filename, media.stream, media.content_type)},
            )
        except (requests.RequestException, ValueError) as exc:
            log.warning("media.upload_failed", extra={"status": type(exc).__name__})
            raise MediaUploadError(media.field, str(exc)) from exc

        url = body.get("secure_url") or body.get("url")
        public_id = body.get("public_id")
        if not url or not public_id:
            raise MediaUploadError(media.field, "response without url or public_id")
        log.info("media.uploaded", extra={"public_id": public_id})
        return UploadedMedia(url=url, public_id=public_id)

    def delete(self, url: str) -> None:
        """
        Destroy the image stored at ``url``.

        :raises MediaDeleteError: Underivable public id, network failure,
            non-2xx reply, or a result other than ``ok``.
        """
        public_id = extract_public_id(url)
        if not public_id:
            raise MediaDeleteError(url, "cannot derive public id")
        try:
            body = self._post(
                self._endpoint("image", "destroy"),
                data=self._signed({"public_id": public_id}),
            )
        except (requests.RequestException, ValueError) as exc:
            raise MediaDeleteError(url, str(exc)) from exc
        if body.get("result") != "ok":
            raise MediaDeleteError(url, f"result={body.get('result')!r}")
        log.info("media.deleted", extra={"public_id": public_id})
