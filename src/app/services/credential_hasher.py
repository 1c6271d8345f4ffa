from abc import ABC, abstractmethod
from typing import Optional, Tuple


class ICredentialHasher(ABC):
    """Derives and verifies salted password hashes"""

    @abstractmethod
    def hash(self, plaintext: str, rounds: Optional[int] = None) -> Tuple[str, str]:
        """
        Hash a plaintext password.

        Args:
            plaintext: Password to hash
            rounds: Cost factor; None means the hasher default

        Returns:
            Tuple of (salt, hash)
        """
        pass

    @abstractmethod
    def verify(self, plaintext: str, salt: str, hashed: str) -> bool:
        """Check a plaintext password against a stored (salt, hash) pair"""
        pass
