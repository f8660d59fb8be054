"""
Image Ingestion Worker — Turns a menu item's image reference into a stored image URL.

A menu item's image_url is one of:

  - A local asset token (e.g., "burger-one.png"). The mobile app bundles these
    and maps them itself, so the token is returned unchanged with no network call.

  - A remote URL (http/https). The image is downloaded, re-uploaded to the
    Appwrite bucket under a new file id, and replaced by the bucket's public
    view URL:
        {endpoint}/storage/buckets/{bucketId}/files/{fileId}/view?project={projectId}

Fetch rules for remote images:
  - A browser-like User-Agent is sent; some image CDNs reject bare clients.
  - The whole download (connect + body) must finish within fetch_timeout
    seconds (30 by default), however slowly the origin sends. On expiry the
    response is closed.
  - Images over max_bytes (10 MiB) are not uploaded. Content-Length is checked
    first; the body is streamed and abandoned as soon as it passes the limit.
  - The stored filename is the last path segment without its query string.

Any failure (timeout, non-2xx, oversize, upload error) takes the fallback path:
the cause is printed and the original reference is kept, so every menu item
still gets an image value. Nothing is retried.

Pipeline context:
    Called once per menu item in Step 4 of CatalogLinker.seed(), unless the
    run skips image upload.
"""

import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import Dict, Optional

import requests

from config import IMAGE_USER_AGENT

from .appwrite_client import AppwriteClient, unique_id
from .exceptions import ImageIngestionFailure

LOCAL = "local"
UPLOADED = "uploaded"
DEGRADED = "degraded"

DEFAULT_CONTENT_TYPE = "image/png"
_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class ImageResolution:
    """Outcome of resolving one image reference.

    Attributes:
        original: The reference as declared in the dataset.
        reference: The value to store on the menu document.
        status: LOCAL, UPLOADED or DEGRADED.
        cause: Why the upload was abandoned (DEGRADED only).
        file_id: Id of the uploaded file (UPLOADED only).
    """

    original: str
    reference: str
    status: str
    cause: Optional[str] = None
    file_id: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.status == DEGRADED


def is_local_asset(reference: str) -> bool:
    """True when the reference is a bundled asset name rather than a URL."""
    return not reference.startswith("http") and "://" not in reference


def filename_from_url(url: str) -> str:
    """Last path segment of a URL with any query string removed.

    Falls back to "file-{epoch_ms}.png" when the URL ends in a slash.
    """
    name = url.split("/")[-1].split("?")[0]
    return name or f"file-{int(time.time() * 1000)}.png"


class ImageIngestionWorker:
    """Fetches remote images and re-hosts them in the Appwrite bucket.

    Attributes:
        client: AppwriteClient used for the upload and view URL.
        fetch_timeout: Wall-clock seconds allowed per download.
        max_bytes: Largest payload that will be uploaded.
        debug: Enable verbose output.
    """

    def __init__(
        self,
        client: AppwriteClient,
        fetch_timeout: float = 30,
        max_bytes: int = 10 * 1024 * 1024,
        http_session: Optional[requests.Session] = None,
        debug: bool = False,
    ):
        self.client = client
        self.fetch_timeout = fetch_timeout
        self.max_bytes = max_bytes
        self.debug = debug
        # Separate from the Appwrite session so the API key is never sent to origins
        self._http = http_session or requests.Session()

    def resolve_image(self, reference: str) -> str:
        """Return the image value to store for this reference. Never raises."""
        return self.ingest(reference).reference

    def ingest(self, reference: str) -> ImageResolution:
        """Resolve a reference, reporting how it was resolved. Never raises."""
        if is_local_asset(reference):
            print(f"  Using local asset: {reference}")
            return ImageResolution(original=reference, reference=reference, status=LOCAL)

        print(f"  Fetching image from: {reference}")
        try:
            content, content_type = self._fetch(reference)
            file_id = self._upload(reference, content, content_type)
        except Exception as e:
            print(f"  WARNING: Image upload failed for {reference}: {e}")
            print("  Using original URL as fallback")
            return ImageResolution(
                original=reference,
                reference=reference,
                status=DEGRADED,
                cause=str(e),
            )

        view_url = self.client.file_view_url(file_id)
        print(f"  Image uploaded: {file_id}")
        if self.debug:
            print(f"  Image URL: {view_url}")
        return ImageResolution(
            original=reference,
            reference=view_url,
            status=UPLOADED,
            file_id=file_id,
        )

    def _fetch(self, url: str):
        """Download the image within the deadline and size limit.

        The download runs on a worker thread so the deadline holds even when
        the origin trickles bytes slowly enough to dodge the socket timeout.
        On expiry the response is closed and the worker is abandoned.

        Returns:
            Tuple of (content bytes, content type).

        Raises:
            ImageIngestionFailure: On timeout, non-2xx status or oversize payload.
        """
        deadline = time.monotonic() + self.fetch_timeout
        in_flight: Dict[str, requests.Response] = {}
        executor = ThreadPoolExecutor(max_workers=1)
        try:
            future = executor.submit(self._download, url, deadline, in_flight)
            try:
                return future.result(timeout=self.fetch_timeout)
            except FutureTimeout:
                response = in_flight.get("response")
                if response is not None:
                    response.close()
                raise ImageIngestionFailure(f"Timed out after {self.fetch_timeout}s")
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _download(self, url: str, deadline: float, in_flight: Dict[str, requests.Response]):
        headers = {"User-Agent": IMAGE_USER_AGENT}

        try:
            response = self._http.get(url, headers=headers, timeout=self.fetch_timeout, stream=True)
        except requests.Timeout:
            raise ImageIngestionFailure(f"Timed out after {self.fetch_timeout}s")
        except requests.RequestException as e:
            raise ImageIngestionFailure(f"Request failed: {e}")
        in_flight["response"] = response

        with response:
            if not response.ok:
                raise ImageIngestionFailure(
                    f"Failed to fetch image: {response.status_code} {response.reason}"
                )

            declared = response.headers.get("Content-Length")
            if declared and declared.isdigit() and int(declared) > self.max_bytes:
                raise ImageIngestionFailure(f"Image too large ({declared} bytes)")

            content_type = response.headers.get("Content-Type", "").split(";")[0].strip()

            buffer = bytearray()
            try:
                for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                    if time.monotonic() > deadline:
                        raise ImageIngestionFailure(f"Timed out after {self.fetch_timeout}s")
                    buffer.extend(chunk)
                    if len(buffer) > self.max_bytes:
                        raise ImageIngestionFailure(
                            f"Image too large (more than {self.max_bytes} bytes)"
                        )
            except requests.RequestException as e:
                raise ImageIngestionFailure(f"Download interrupted: {e}")

        return bytes(buffer), content_type or DEFAULT_CONTENT_TYPE

    def _upload(self, url: str, content: bytes, content_type: str) -> str:
        name = filename_from_url(url)
        print(f"  Uploading file: {name}, size: {len(content)} bytes, type: {content_type}")
        created = self.client.create_file(unique_id(), name, content, content_type)
        return created["$id"]
