"""
Reset Manager — Clears catalog collections and the image bucket before a seed.

Each clear runs in passes: list what Appwrite returns, delete all of it
concurrently, and list again until the listing comes back empty. A single
listing is one page (25 items by default), so passes keep going until the
collection or bucket is really empty. An id that is listed again after its
delete succeeded means the listing is stale, and the clear fails rather than
looping forever.

Within a pass the deletes are independent (documents in one collection do not
reference each other), so they are submitted together to a thread pool and the
pass completes once all of them have resolved. The first failed delete cancels
whatever has not started yet and raises ResetFailure. Deletes that already went
through stay deleted; there is no rollback.

Pipeline context:
    Step 1 of CatalogLinker.seed(). clear_storage() is skipped entirely when
    seeding with skip_image_upload=True.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, List, Set

from .appwrite_client import AppwriteClient
from .exceptions import ResetFailure


class ResetManager:
    """Deletes every document in a collection, or every file in the bucket.

    Attributes:
        client: AppwriteClient used for listing and deleting.
        max_workers: Upper bound on concurrent deletes per pass.
        debug: If True, print each deleted id.
    """

    def __init__(self, client: AppwriteClient, max_workers: int = 10, debug: bool = False):
        self.client = client
        self.max_workers = max(1, max_workers)
        self.debug = debug

    def clear_collection(self, collection_id: str) -> int:
        """Delete all documents in a collection.

        Returns:
            The number of documents deleted (0 for an empty collection).

        Raises:
            ResetFailure: If listing or any delete fails.
        """
        print(f"  Clearing collection: {collection_id}")
        target = f"collection {collection_id}"
        deleted = self._clear(
            target,
            lambda: self.client.list_documents(collection_id).get("documents", []),
            lambda doc_id: self.client.delete_document(collection_id, doc_id),
        )
        print(f"  Cleared {deleted} documents from {collection_id}")
        return deleted

    def clear_storage(self) -> int:
        """Delete all files in the image bucket.

        Returns:
            The number of files deleted (0 for an empty bucket).

        Raises:
            ResetFailure: If listing or any delete fails.
        """
        bucket_id = self.client.bucket_id
        print(f"  Clearing storage bucket: {bucket_id}")
        deleted = self._clear(
            f"bucket {bucket_id}",
            lambda: self.client.list_files().get("files", []),
            lambda file_id: self.client.delete_file(file_id),
        )
        print(f"  Cleared {deleted} files from storage")
        return deleted

    def clear_all(self, collection_ids: List[str]) -> Dict[str, int]:
        """Clear several collections in the given order.

        Returns:
            A dict of collection_id -> documents deleted.
        """
        return {cid: self.clear_collection(cid) for cid in collection_ids}

    def _clear(
        self,
        target: str,
        list_items: Callable[[], List[Dict]],
        delete_item: Callable[[str], None],
    ) -> int:
        total = 0
        deleted: Set[str] = set()
        while True:
            try:
                items = list_items()
            except Exception as e:
                raise ResetFailure(target, e) from e

            if not items:
                return total

            ids = [item["$id"] for item in items]
            reappeared = deleted.intersection(ids)
            if reappeared:
                raise ResetFailure(
                    target,
                    RuntimeError(f"deleted items still listed: {', '.join(sorted(reappeared))}"),
                )

            if self.debug:
                print(f"    Found {len(items)} items to delete in {target}")

            self._delete_batch(target, ids, delete_item)
            deleted.update(ids)
            total += len(ids)

    def _delete_batch(self, target: str, ids: List[str], delete_item: Callable[[str], None]) -> None:
        """Delete ids concurrently; fail fast on the first error."""
        workers = min(self.max_workers, len(ids))
        executor = ThreadPoolExecutor(max_workers=workers)
        try:
            futures = {executor.submit(delete_item, item_id): item_id for item_id in ids}
            for future in as_completed(futures):
                try:
                    future.result()
                except Exception as e:
                    raise ResetFailure(target, e) from e
                if self.debug:
                    print(f"    Deleted {futures[future]}")
        finally:
            executor.shutdown(wait=True, cancel_futures=True)
