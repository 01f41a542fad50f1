import asyncio
import logging

import bcrypt

from .exceptions import InvalidArgumentError

# bcrypt only looks at the first 72 bytes and rejects longer input
MAX_PASSWORD_BYTES = 72


def password_fits(password: str) -> bool:
    return len(password.encode("utf-8")) <= MAX_PASSWORD_BYTES


class PasswordHasher:
    """
    Bcrypt hashing with a configurable work factor.
    Hashing and checking are CPU-bound, so the async variants run them in the default executor.
    """
    def __init__(self, rounds: int = 12, logger: logging.Logger | None = None):
        self.rounds = rounds
        self.logger = logger or logging.getLogger(__name__)
        # Same cost as real hashes, so unknown users take as long as wrong passwords
        self._dummy_hash = self._hash(b"messagely-dummy-password")

    def _hash(self, password: bytes) -> str:
        return bcrypt.hashpw(password, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def hash_password(self, password: str) -> str:
        if not password_fits(password):
            raise InvalidArgumentError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return self._hash(password.encode("utf-8"))

    def check_password(self, password: str, hashed_password: str) -> bool:
        """
        Over-long passwords can never match a stored hash; they still pay
        for one bcrypt round trip so the response time stays the same.
        """
        if not password_fits(password):
            self.burn_dummy_check(password)
            return False

        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
        except ValueError:
            self.logger.error("Stored password hash is not a valid bcrypt hash")
            return False

    def burn_dummy_check(self, password: str) -> None:
        password_bytes = password.encode("utf-8")[:MAX_PASSWORD_BYTES]
        bcrypt.checkpw(password_bytes, self._dummy_hash.encode("utf-8"))

    async def hash_password_async(self, password: str) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.hash_password, password)

    async def check_password_async(self, password: str, hashed_password: str) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.check_password, password, hashed_password)

    async def burn_dummy_check_async(self, password: str) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.burn_dummy_check, password)
