import hmac
from typing import Optional, Tuple

import bcrypt

from src.app.services.credential_hasher import ICredentialHasher


class BcryptCredentialHasher(ICredentialHasher):
    """
    Bcrypt password hashing.

    The salt produced by bcrypt.gensalt embeds the cost factor, so hashes
    created under older rounds still verify after the default changes.
    """

    def __init__(self, default_rounds: int = 12):
        self.default_rounds = default_rounds

    def hash(self, plaintext: str, rounds: Optional[int] = None) -> Tuple[str, str]:
        salt = bcrypt.gensalt(rounds or self.default_rounds)
        hashed = bcrypt.hashpw(plaintext.encode(), salt)
        return salt.decode(), hashed.decode()

    def verify(self, plaintext: str, salt: str, hashed: str) -> bool:
        candidate = bcrypt.hashpw(plaintext.encode(), salt.encode())
        return hmac.compare_digest(candidate, hashed.encode())
