class BlobStoreError(Exception):
    """Base exception for blob storage failures."""


class BlobNotFoundError(BlobStoreError):
    """Raised when no blob exists under a key."""


class UnsupportedBlobStoreError(BlobStoreError):
    """Raised when settings name a blob store that is not available."""
