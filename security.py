import bcrypt
from typing import Optional
from config import BCRYPT_ROUNDS


class PasswordHasher:
    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds

    def hash_password(self, password: str) -> str:
        """Hash a delete password for storage"""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')

    def verify_password(self, password: Optional[str], hashed: str) -> bool:
        """Verify a supplied delete password against the stored hash"""
        if password is None:
            return False
        try:
            return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
        except ValueError:
            # stored value is not a bcrypt hash
            return False
