from pathlib import Path

from formconvert.config.settings import Settings
from formconvert.storage.base import BaseBlobStore
from formconvert.storage.exceptions import UnsupportedBlobStoreError
from formconvert.storage.local_blob_store import LocalBlobStore


class BlobStoreFactory:
    """Creates the blob store named in settings."""

    @classmethod
    def create(cls, settings: Settings) -> BaseBlobStore:
        kind = settings.blob_store.lower()
        if kind == "local":
            return LocalBlobStore(root=Path(settings.blob_root))
        raise UnsupportedBlobStoreError(
            f"blob_store '{settings.blob_store}' is not supported"
        )
