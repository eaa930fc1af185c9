import hashlib
import secrets


def generate_session_token() -> str:
    """Opaque token handed to the client once, at login."""
    return secrets.token_urlsafe(32)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()

