from abc import ABC, abstractmethod
from typing import Optional


# Abstract key-value cache with expiry (implemented for Redis, in-memory fakes in tests, etc.)
class CacheStore(ABC):
    """
    Implementations raise CacheUnavailableError when the backing server
    cannot be reached; callers decide whether that is fatal.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent or expired."""
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the key. Deleting an absent key is not an error."""
        raise NotImplementedError

    @abstractmethod
    def ping(self) -> bool:
        raise NotImplementedError

    def close(self) -> None:
        pass
