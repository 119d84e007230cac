"""Generates client identity tokens."""
import secrets


def generate_client_id() -> str:
    """Generate a 32-character hexadecimal client identity.

    Browsers normally bring their own id; this is only used for clients that
    arrive without one.

    Returns:
        A cryptographically secure hex token string.
    """
    return secrets.token_hex(16)
