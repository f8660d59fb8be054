"""Shared fixtures: an in-memory stand-in for AppwriteClient."""

import itertools
import threading

import pytest

from core.catalog_linker import CATEGORIES, CUSTOMIZATIONS, MENU, MENU_CUSTOMIZATIONS
from core.exceptions import AppwriteAPIError

COLLECTIONS = {
    CATEGORIES: "col_categories",
    CUSTOMIZATIONS: "col_customizations",
    MENU: "col_menu",
    MENU_CUSTOMIZATIONS: "col_menu_customizations",
}


class FakeAppwrite:
    """Mimics the AppwriteClient surface the pipeline uses.

    Listings return at most page_size items, like Appwrite's default page of 25.
    Every call is appended to `calls` as (method_name, args).
    """

    endpoint = "https://cloud.example.com/v1"
    project_id = "proj-1"
    database_id = "db-1"
    bucket_id = "bucket-1"

    def __init__(self, page_size=25):
        self.page_size = page_size
        self.documents = {cid: {} for cid in COLLECTIONS.values()}
        self.files = {}
        self.calls = []
        self.fail_on = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def _record(self, name, *args):
        with self._lock:
            self.calls.append((name, args))
        error = self.fail_on.get(name)
        if error is not None:
            raise error

    def calls_named(self, name):
        return [args for call, args in self.calls if call == name]

    def storage_calls(self):
        return [c for c, _ in self.calls if c in ("list_files", "create_file", "delete_file")]

    def list_documents(self, collection_id):
        self._record("list_documents", collection_id)
        docs = list(self.documents[collection_id].values())
        return {"total": len(docs), "documents": docs[:self.page_size]}

    def create_document(self, collection_id, data, document_id=None):
        self._record("create_document", collection_id, data)
        doc_id = document_id or f"doc{next(self._ids)}"
        doc = dict(data, **{"$id": doc_id})
        self.documents[collection_id][doc_id] = doc
        return doc

    def delete_document(self, collection_id, document_id):
        self._record("delete_document", collection_id, document_id)
        with self._lock:
            if document_id not in self.documents[collection_id]:
                raise AppwriteAPIError(404, "Document not found", "document_not_found")
            del self.documents[collection_id][document_id]

    def count_documents(self, collection_id):
        return self.list_documents(collection_id)["total"]

    def list_files(self, bucket_id=None):
        self._record("list_files")
        files = list(self.files.values())
        return {"total": len(files), "files": files[:self.page_size]}

    def create_file(self, file_id, name, content, content_type, bucket_id=None):
        self._record("create_file", file_id, name, content_type)
        entry = {"$id": file_id, "name": name, "mimeType": content_type, "sizeOriginal": len(content)}
        self.files[file_id] = entry
        return entry

    def delete_file(self, file_id, bucket_id=None):
        self._record("delete_file", file_id)
        with self._lock:
            del self.files[file_id]

    def file_view_url(self, file_id, bucket_id=None):
        return (
            f"{self.endpoint}/storage/buckets/{bucket_id or self.bucket_id}"
            f"/files/{file_id}/view?project={self.project_id}"
        )


@pytest.fixture
def fake_appwrite():
    return FakeAppwrite()


@pytest.fixture
def collections():
    return dict(COLLECTIONS)
