"""Generates 6-digit game codes."""
import random
import string


def generate_game_code(length: int = 6) -> str:
    """Generate a random numeric game code.

    Leading zeros are kept, so "004211" is a valid code.

    Args:
        length: Number of digits in the code. Defaults to 6.

    Returns:
        A random string of decimal digits.
    """
    return "".join(random.choices(string.digits, k=length))
