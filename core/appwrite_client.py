"""
Appwrite API Client — Handles all REST calls to the Appwrite project.

This module is responsible for all HTTP communication with Appwrite. It covers
two Appwrite services:

  1. Databases — listing, creating and deleting documents in the four catalog
     collections (categories, customizations, menu, menu_customizations).

  2. Storage — listing, uploading and deleting files in the image bucket, and
     updating the bucket's permissions.

Authentication:
    Every request carries the project id and a server API key:
        X-Appwrite-Project: <project id>
        X-Appwrite-Key:     <api key>

    The key is attached to this client's session only. Image origins are
    fetched through a separate session (see ImageIngestionWorker) so the key
    never leaves Appwrite.

Error responses:
    Appwrite returns errors as JSON: {"message": "...", "code": 404, "type": "..."}.
    Any non-2xx response is raised as AppwriteAPIError.

Pipeline context:
    Used by ResetManager (list + delete), ImageIngestionWorker (file upload),
    CatalogLinker (document creation and verification counts) and
    StorageDiagnostics (file listing, bucket permissions).
"""

import secrets
import time
from typing import Dict, Any, Optional, List

import requests

from .exceptions import AppwriteAPIError


def unique_id() -> str:
    """Generate an Appwrite-compatible unique id.

    Mirrors the SDK's ID.unique(): hex seconds and microseconds followed by
    random hex padding. Result is 20 lowercase hex characters.
    """
    now = time.time()
    seconds = int(now)
    micros = int((now - seconds) * 1_000_000)
    return f"{seconds:08x}{micros:05x}{secrets.token_hex(4)[:7]}"


class AppwriteClient:
    """Client for the Appwrite Databases and Storage REST APIs.

    Attributes:
        endpoint: API endpoint including the version suffix
            (e.g., "https://nyc.cloud.appwrite.io/v1"), trailing slash stripped.
        project_id: Appwrite project id.
        database_id: Database holding the catalog collections.
        bucket_id: Storage bucket holding the menu images.
        timeout: Seconds allowed per API call.
        debug: If True, print each request.
    """

    def __init__(
        self,
        endpoint: str,
        project_id: str,
        api_key: str,
        database_id: str,
        bucket_id: str,
        timeout: float = 30,
        debug: bool = False,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.project_id = project_id
        self.database_id = database_id
        self.bucket_id = bucket_id
        self.timeout = timeout
        self.debug = debug
        self._session = requests.Session()
        self._session.headers.update({
            "X-Appwrite-Project": project_id,
            "X-Appwrite-Key": api_key,
        })

    # ------------------------------------------------------------------
    # Databases
    # ------------------------------------------------------------------

    def list_documents(self, collection_id: str) -> Dict[str, Any]:
        """List documents in a collection.

        Calls GET /databases/{databaseId}/collections/{collectionId}/documents.
        Appwrite returns one page (25 documents by default) plus the total count.

        Returns:
            A dict with "total" (int) and "documents" (list of dicts with "$id").
        """
        return self._request("GET", self._documents_path(collection_id))

    def create_document(
        self,
        collection_id: str,
        data: Dict[str, Any],
        document_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create a document and return it, including its generated "$id".

        Args:
            collection_id: Target collection.
            data: Document attributes.
            document_id: Explicit id; a new unique id is generated if omitted.
        """
        payload = {"documentId": document_id or unique_id(), "data": data}
        return self._request("POST", self._documents_path(collection_id), json=payload)

    def delete_document(self, collection_id: str, document_id: str) -> None:
        """Delete one document. Appwrite answers 204 No Content."""
        self._request("DELETE", f"{self._documents_path(collection_id)}/{document_id}")

    def count_documents(self, collection_id: str) -> int:
        """Return the collection's total document count as reported by Appwrite."""
        return int(self.list_documents(collection_id).get("total", 0))

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def list_files(self, bucket_id: Optional[str] = None) -> Dict[str, Any]:
        """List files in a bucket.

        Returns:
            A dict with "total" (int) and "files" (list of dicts with "$id", "name").
        """
        return self._request("GET", self._files_path(bucket_id))

    def create_file(
        self,
        file_id: str,
        name: str,
        content: bytes,
        content_type: str,
        bucket_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Upload a file as multipart/form-data.

        Calls POST /storage/buckets/{bucketId}/files with form fields
        "fileId" and "file". Appwrite accepts at most 5 MB per request, so
        larger files are sent in Content-Range chunks; every chunk after the
        first carries the file id in X-Appwrite-ID.

        Returns:
            The created file, including "$id".
        """
        chunk_size = 5 * 1024 * 1024
        path = self._files_path(bucket_id)

        if len(content) <= chunk_size:
            return self._request(
                "POST",
                path,
                data={"fileId": file_id},
                files={"file": (name, content, content_type)},
            )

        result: Dict[str, Any] = {}
        total = len(content)
        for start in range(0, total, chunk_size):
            chunk = content[start:start + chunk_size]
            end = start + len(chunk) - 1
            headers = {"Content-Range": f"bytes {start}-{end}/{total}"}
            if start:
                headers["X-Appwrite-ID"] = file_id
            result = self._request(
                "POST",
                path,
                data={"fileId": file_id},
                files={"file": (name, chunk, content_type)},
                headers=headers,
            )
        return result

    def delete_file(self, file_id: str, bucket_id: Optional[str] = None) -> None:
        """Delete one file from a bucket."""
        self._request("DELETE", f"{self._files_path(bucket_id)}/{file_id}")

    def update_bucket(self, name: str, permissions: List[str], bucket_id: Optional[str] = None) -> Dict[str, Any]:
        """Replace a bucket's name and permission list.

        Calls PUT /storage/buckets/{bucketId}. Requires an API key with the
        buckets.write scope.
        """
        bucket = bucket_id or self.bucket_id
        payload = {"name": name, "permissions": permissions}
        return self._request("PUT", f"/storage/buckets/{bucket}", json=payload)

    def file_view_url(self, file_id: str, bucket_id: Optional[str] = None) -> str:
        """Build the public view URL for a stored file.

        The app's image loader parses this exact shape, so it must not change:
            {endpoint}/storage/buckets/{bucketId}/files/{fileId}/view?project={projectId}
        """
        bucket = bucket_id or self.bucket_id
        return f"{self.endpoint}/storage/buckets/{bucket}/files/{file_id}/view?project={self.project_id}"

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _documents_path(self, collection_id: str) -> str:
        return f"/databases/{self.database_id}/collections/{collection_id}/documents"

    def _files_path(self, bucket_id: Optional[str]) -> str:
        return f"/storage/buckets/{bucket_id or self.bucket_id}/files"

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        """Send a request and decode the JSON body.

        Raises:
            AppwriteAPIError: If Appwrite answers with a non-2xx status.
            requests.RequestException: On connection errors or timeouts.
        """
        url = f"{self.endpoint}{path}"
        if self.debug:
            print(f"  {method} {url}")

        response = self._session.request(method, url, timeout=self.timeout, **kwargs)

        if not response.ok:
            raise _api_error(response)

        if response.status_code == 204 or not response.content:
            return {}
        return response.json()


def _api_error(response: requests.Response) -> AppwriteAPIError:
    try:
        body = response.json()
    except ValueError:
        return AppwriteAPIError(response.status_code, response.text or response.reason or "")
    if not isinstance(body, dict):
        return AppwriteAPIError(response.status_code, str(body))
    return AppwriteAPIError(
        response.status_code,
        body.get("message", response.reason or ""),
        body.get("type"),
    )
