import secrets
import string
from typing import Optional

ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase
DEFAULT_LENGTH = 7
# width of the links.code column
MAX_CODE_LENGTH = 32


class CodeGenerator:
    """Random fixed-length codes over a 62-character alphabet.

    Every character is an independent uniform draw, so two calls may
    return the same code; the store is what rejects duplicates.
    """

    def __init__(self, length: int = DEFAULT_LENGTH, rng=None):
        if not 1 <= length <= MAX_CODE_LENGTH:
            raise ValueError(f"length must be between 1 and {MAX_CODE_LENGTH}")
        self.length = length
        self.rng = rng or secrets.SystemRandom()

    def generate(self) -> str:
        return ''.join(self.rng.choice(ALPHABET) for _ in range(self.length))


def is_valid_code(code: Optional[str], length: Optional[int] = None) -> bool:
    """Checks that a code could have come from CodeGenerator.

    Without ``length`` any length up to the column width is accepted, so
    links stay reachable after the configured code length changes.
    """
    if not code:
        return False
    if length is not None and len(code) != length:
        return False
    if len(code) > MAX_CODE_LENGTH:
        return False
    return all(c in ALPHABET for c in code)
