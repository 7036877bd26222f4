from typing import Optional

from passlib.context import CryptContext

from chaktrang.infra.config.settings import get_settings

settings = get_settings()


class PasswordService:
    """One-way password hashing with per-hash random salts (bcrypt)"""

    def __init__(self, rounds: Optional[int] = None):
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds or settings.BCRYPT_ROUNDS
        )
        # Verified against when the identity is unknown so both login failures cost the same
        self._dummy_hash = self.pwd_context.hash("ouk-chaktrang-dummy-password")

    def hash(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify(self, password: str, password_hash: Optional[str]) -> bool:
        if not password_hash:
            self.pwd_context.verify(password, self._dummy_hash)
            return False
        try:
            return self.pwd_context.verify(password, password_hash)
        except (ValueError, TypeError):
            return False

