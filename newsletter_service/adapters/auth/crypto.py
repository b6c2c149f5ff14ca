from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from pydantic import SecretStr

from newsletter_service.domain.errors import PasswordHashFormatError

# Argon2id, m=15000 KiB, t=2, p=1. Shared by real hashes and the dummy hash.
ARGON2_MEMORY_COST = 15000
ARGON2_TIME_COST = 2
ARGON2_PARALLELISM = 1


class Argon2AuthAdapter:
    """Argon2id password hashing. Every call is CPU-bound; keep it off the event loop."""

    def __init__(
        self,
        memory_cost: int = ARGON2_MEMORY_COST,
        time_cost: int = ARGON2_TIME_COST,
        parallelism: int = ARGON2_PARALLELISM,
    ) -> None:
        self.ph = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            type=Type.ID,
        )

    def hash_password(self, password: SecretStr) -> str:
        """Return a PHC-encoded Argon2id hash with a random salt."""
        return str(self.ph.hash(password.get_secret_value()))

    def verify_password(self, password: SecretStr, password_hash: SecretStr) -> bool:
        try:
            self.ph.verify(password_hash.get_secret_value(), password.get_secret_value())
            return True
        except VerifyMismatchError:
            return False
        except InvalidHashError as e:
            raise PasswordHashFormatError("Stored password hash is not a valid PHC string") from e
        except VerificationError:
            return False
