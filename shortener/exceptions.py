class ShortenerError(Exception):
    """Base class for link shortener errors."""


class InvalidURLError(ShortenerError):
    """The URL is missing, malformed or not http(s)."""


class DuplicateCodeError(ShortenerError):
    """A link with this code already exists."""

    def __init__(self, code: str):
        super().__init__(f"Code already exists: {code}")
        self.code = code


class RetriesExhaustedError(ShortenerError):
    """Every candidate code collided with an existing link."""

    def __init__(self, attempts: int):
        super().__init__(f"No unique code after {attempts} attempts")
        self.attempts = attempts


class LinkNotFoundError(ShortenerError):
    def __init__(self, code: str):
        super().__init__(f"Code not found: {code}")
        self.code = code


class StorageError(ShortenerError):
    """The database failed or could not be reached."""
