from abc import ABC, abstractmethod


def conversion_source_key(org_id: str, sanitized_filename: str) -> str:
    """Storage key for an uploaded conversion source: conversions/{org_id}/{filename}"""
    return f"conversions/{org_id}/{sanitized_filename}"


class BaseBlobStore(ABC):
    """Contract for the store that holds uploaded source documents."""

    @abstractmethod
    def put(self, key: str, content: bytes) -> None:
        """Write content under key, replacing anything already there."""

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Read the bytes stored under key.

        Raises:
            BlobNotFoundError: if nothing is stored under key.
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key. Deleting a missing key is not an error."""
