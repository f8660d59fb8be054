"""
Storage Diagnostics — Checks that seeded images are actually viewable.

Uploaded images are only useful if the app can load their view URLs without a
session, which depends on the bucket's permissions. These helpers answer
"can the app see the images?" without touching the catalog collections:

  check_access()            List the bucket and GET the first file's view URL.
  get_info()                Endpoint/project/bucket plus every file's view URL.
  debug_image_url(file_id)  HEAD one file's view URL and report the status.
  fix_bucket_permissions()  Make the bucket publicly readable (needs an API
                            key with the buckets.write scope).

Network failures are reported in the returned StorageCheckResult rather than
raised, except for get_info(), which propagates listing errors.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from config import BUCKET_PERMISSIONS

from .appwrite_client import AppwriteClient


@dataclass
class StorageCheckResult:
    success: bool = True
    url: Optional[str] = None
    status: Optional[int] = None
    error: Optional[str] = None
    message: Optional[str] = None
    files: List[Dict[str, Any]] = field(default_factory=list)


class StorageDiagnostics:
    """Read-only checks (and one permission fix) against the image bucket."""

    def __init__(
        self,
        client: AppwriteClient,
        http_session: Optional[requests.Session] = None,
        timeout: float = 30,
        debug: bool = False,
    ):
        self.client = client
        self.timeout = timeout
        self.debug = debug
        # Unauthenticated on purpose: the check is whether anonymous viewers can load images
        self._http = http_session or requests.Session()

    def check_access(self) -> StorageCheckResult:
        print("  Testing storage access...")
        try:
            files = self.client.list_files().get("files", [])
        except Exception as e:
            print(f"  Storage test failed: {e}")
            return StorageCheckResult(success=False, error=str(e))

        print(f"  Found {len(files)} files in storage")
        if not files:
            print("  No files found in storage bucket")
            return StorageCheckResult(message="No files to test")

        url = self.client.file_view_url(files[0]["$id"])
        print(f"  Test image URL: {url}")
        try:
            response = self._http.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            print(f"  Network error accessing storage: {e}")
            return StorageCheckResult(success=False, url=url, error="Network error")

        if response.ok:
            print("  Storage images are accessible")
            return StorageCheckResult(url=url, status=response.status_code)

        print(f"  Storage access failed: {response.status_code} {response.reason}")
        return StorageCheckResult(
            success=False,
            url=url,
            status=response.status_code,
            error=f"HTTP {response.status_code}",
        )

    def get_info(self) -> StorageCheckResult:
        """Describe the bucket and list every file with its view URL.

        Raises:
            AppwriteAPIError: If the bucket cannot be listed.
        """
        files = self.client.list_files().get("files", [])
        print("  Storage Configuration:")
        print(f"    Endpoint: {self.client.endpoint}")
        print(f"    Project ID: {self.client.project_id}")
        print(f"    Bucket ID: {self.client.bucket_id}")
        print(f"    Files count: {len(files)}")

        listed = [
            {
                "id": f["$id"],
                "name": f.get("name", ""),
                "url": self.client.file_view_url(f["$id"]),
            }
            for f in files
        ]
        if self.debug:
            for entry in listed:
                print(f"    {entry['name']}: {entry['url']}")
        return StorageCheckResult(files=listed, message=f"{len(files)} files")

    def debug_image_url(self, file_id: str) -> StorageCheckResult:
        url = self.client.file_view_url(file_id)
        print(f"  Testing URL: {url}")
        try:
            response = self._http.head(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            print(f"  Network error: {e}")
            return StorageCheckResult(success=False, url=url, error=str(e))

        print(f"  Response status: {response.status_code}")
        if self.debug:
            print(f"  Response headers: {dict(response.headers)}")

        if response.ok:
            print("  URL is accessible")
            return StorageCheckResult(url=url, status=response.status_code)

        print(f"  URL not accessible: {response.status_code} {response.reason}")
        return StorageCheckResult(
            success=False,
            url=url,
            status=response.status_code,
            error=response.reason,
        )

    def fix_bucket_permissions(self, bucket_name: str) -> StorageCheckResult:
        try:
            self.client.update_bucket(bucket_name, BUCKET_PERMISSIONS)
        except Exception as e:
            print(f"  Error updating bucket permissions: {e}")
            return StorageCheckResult(success=False, error=str(e))

        print("  Bucket permissions updated successfully")
        return StorageCheckResult(message=", ".join(BUCKET_PERMISSIONS))
