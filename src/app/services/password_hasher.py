import bcrypt

# One dummy digest per cost factor, shared by all hasher instances
_DUMMY_HASHES = {}


class PasswordHasher:
    """
    bcrypt wrapper - the only place passwords are hashed or compared.

    bcrypt salts every digest, so two hashes of the same password differ,
    and checkpw compares in constant time.
    """

    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        digest = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(self.rounds))
        return digest.decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except (ValueError, AttributeError):
            # Malformed or missing hash, or a password over 72 bytes, never verifies
            return False

    def verify_dummy(self, password: str) -> bool:
        """Spend one verification so unknown accounts cost as much as real ones"""
        dummy_hash = _DUMMY_HASHES.get(self.rounds)
        if dummy_hash is None:
            dummy_hash = _DUMMY_HASHES[self.rounds] = self.hash("dummy-password-for-timing")
        self.verify(password, dummy_hash)
        return False

    def is_reused(self, password: str, history: list, depth: int) -> bool:
        """True if password matches one of the last `depth` hashes"""
        if depth <= 0:
            return False
        return any(self.verify(password, old_hash) for old_hash in history[-depth:])
