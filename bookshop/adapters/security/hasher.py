import hashlib
import hmac

from bookshop.application.ports import PasswordHasher


class SimplePasswordHasher(PasswordHasher):
    def hash(self, raw: str) -> str:
        return hashlib.sha256(raw.encode()).hexdigest()

    def verify(self, raw: str, hashed: str) -> bool:
        return hmac.compare_digest(self.hash(raw), hashed)
