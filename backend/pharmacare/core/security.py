"""Password hashing with bcrypt. Hashes are stored, never plaintext."""
import bcrypt

from pharmacare.core.config import settings
from pharmacare.core.exceptions import ValidationError

# bcrypt only looks at the first 72 bytes of the secret
_BCRYPT_MAX_BYTES = 72


def get_password_hash(password: str) -> str:
    secret = password.encode("utf-8")
    if len(secret) > _BCRYPT_MAX_BYTES:
        raise ValidationError(f"Password must be at most {_BCRYPT_MAX_BYTES} bytes")
    return bcrypt.hashpw(secret, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    secret = plain_password.encode("utf-8")
    if len(secret) > _BCRYPT_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(secret, hashed_password.encode("utf-8"))
    except ValueError:
        # malformed hash in the database
        return False


def validate_password_strength(password: str) -> None:
    """Raise ValidationError when the password is too weak to store."""
    if len(password) < settings.MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters"
        )
    if not any(c.isdigit() for c in password):
        raise ValidationError("Password must contain at least one number")
