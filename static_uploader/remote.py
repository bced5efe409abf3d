"""
Module for listing and bulk-deleting remote objects under a prefix.
"""
import logging
from typing import Iterator, List

from .exceptions import BatchDeleteError, ListingError
from .models import MAX_DELETE_BATCH, DeleteBatch, DeleteSummary, KeyListing
from .storage import ObjectStorage

logger = logging.getLogger(__name__)


def split_batches(keys: List[str], size: int = MAX_DELETE_BATCH) -> Iterator[DeleteBatch]:
    """Split keys into consecutive delete batches of at most ``size`` keys."""
    for start in range(0, len(keys), size):
        yield DeleteBatch(keys[start:start + size])


class RemoteObjectManager:
    """Lists objects by prefix and deletes them in batches."""

    def __init__(self, storage: ObjectStorage, page_size: int = 1000):
        self.storage = storage
        self.page_size = page_size

    def fetch_keys(self, prefix: str) -> KeyListing:
        """Collect every key under a prefix, following continuation markers.

        A page that cannot be fetched ends the listing; the keys gathered
        before it are returned and the listing is marked incomplete.

        Args:
            prefix: Key prefix to list

        Returns:
            KeyListing object
        """
        listing = KeyListing(prefix=prefix)
        marker = None
        pages = 0

        while True:
            try:
                page, marker = self.storage.list_objects(prefix, marker, self.page_size)
            except ListingError as e:
                logger.error(f"Listing stopped after {pages} pages: {e}")
                listing.complete = False
                break

            pages += 1
            listing.keys.extend(page)
            if not marker:
                break

        logger.info(f"Fetched {len(listing.keys)} keys under '{prefix}' in {pages} pages")
        return listing

    def delete_keys(self, keys: List[str]) -> DeleteSummary:
        """Delete keys in batches of at most 100.

        A batch that fails as a whole is logged and its keys counted as
        failed; the remaining batches still run.

        Args:
            keys: Keys to delete

        Returns:
            DeleteSummary object
        """
        failed: List[str] = []

        for batch in split_batches(keys):
            try:
                rejected = self.storage.batch_delete(batch.keys)
            except BatchDeleteError as e:
                logger.error(f"Batch delete error: {e}")
                failed.extend(batch.keys)
                continue

            failed.extend(rejected)
            logger.info(f"Deleted batch of {len(batch.keys) - len(rejected)}/{len(batch.keys)} keys")

        return DeleteSummary(
            requested=len(keys),
            deleted=len(keys) - len(failed),
            failed_keys=failed
        )
