import math
import re
import secrets

from src.app.services.token_codec import ITokenCodec


class UrlSafeTokenCodec(ITokenCodec):
    """
    URL-safe base64 reset tokens.

    secrets.token_urlsafe(nbytes) yields ceil(4 * nbytes / 3) characters
    from [A-Za-z0-9_-]; 32 bytes gives 256 bits of entropy in 43 characters.
    """

    def __init__(self, nbytes: int = 32):
        if nbytes < 16:
            raise ValueError("Reset tokens need at least 16 bytes (128 bits) of entropy")
        self.nbytes = nbytes
        self.length = math.ceil(4 * nbytes / 3)
        self._pattern = re.compile(rf"[A-Za-z0-9_-]{{{self.length}}}")

    def generate(self) -> str:
        return secrets.token_urlsafe(self.nbytes)

    def is_well_formed(self, raw: object) -> bool:
        return isinstance(raw, str) and self._pattern.fullmatch(raw) is not None
