"""Short join codes that people read aloud or copy by hand."""
import random
import secrets
from typing import Optional

# Uppercase letters and digits without I, O, 0, 1
JOIN_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
JOIN_CODE_LENGTH = 6


def generate_code(length: int = JOIN_CODE_LENGTH, rng: Optional[random.Random] = None) -> str:
    """Draw `length` symbols uniformly, with replacement. Uniqueness is the caller's job."""
    if length < 1:
        raise ValueError("Join code length must be positive")
    if rng is None:
        return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(length))
    return "".join(rng.choice(JOIN_CODE_ALPHABET) for _ in range(length))


def normalize_code(raw: Optional[str]) -> str:
    return (raw or "").strip().upper()


def is_valid_code(code: str, length: int = JOIN_CODE_LENGTH) -> bool:
    return len(code) == length and all(c in JOIN_CODE_ALPHABET for c in code)
