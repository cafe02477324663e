from flask_bcrypt import check_password_hash, generate_password_hash

# bcrypt ignores (newer releases reject) input past this many bytes
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """Salted one-way bcrypt hashing."""

    def __init__(self, rounds: int = 10):
        self.rounds = rounds
        self._dummy_hash = None

    def hash(self, password: str) -> str:
        return generate_password_hash(password, self.rounds).decode("utf-8")

    def verify(self, password_hash: str, password: str) -> bool:
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            return False
        return check_password_hash(password_hash, password)

    def burn(self, password: str) -> None:
        """Spend one comparison's worth of time for an unknown account."""
        if self._dummy_hash is None:
            self._dummy_hash = self.hash("not-a-real-password")
        self.verify(self._dummy_hash, password)
