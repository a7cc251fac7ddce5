"""Password hashing for stored credentials."""

import bcrypt

# bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """
    Salted one-way hashing with bcrypt.

    Each hash() call draws a fresh salt, so hashing the same password twice gives
    different strings; the salt and cost travel inside the hash itself.
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, plain_password: str) -> str:
        """Hash a plain-text password for storage. Do not store plain passwords."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain_password: str, hashed: str) -> bool:
        """Verify a plain password against a stored hash; a malformed hash never matches."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False
