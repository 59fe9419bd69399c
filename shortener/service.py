import logging
from datetime import timezone
from typing import Any, Callable, Dict

from shortener.codes import CodeGenerator
from shortener.exceptions import (
    DuplicateCodeError,
    InvalidURLError,
    RetriesExhaustedError,
    ShortenerError,
)
from shortener.models import Link
from shortener.store import LinkStore
from shortener.validators import is_valid_http_url

logger = logging.getLogger(__name__)

MAX_CREATE_ATTEMPTS = 5


class ShortenerService:
    """Shorten, look up and redirect on top of a LinkStore."""

    def __init__(
        self,
        store: LinkStore,
        generator: CodeGenerator,
        base_url: str,
        max_attempts: int = MAX_CREATE_ATTEMPTS,
    ):
        self.store = store
        self.generator = generator
        self.base_url = base_url.rstrip("/")
        self.max_attempts = max_attempts

    def short_url(self, code: str) -> str:
        return f"{self.base_url}/{code}"

    def shorten(self, url: str) -> Dict[str, Any]:
        """Stores the URL under a freshly generated code.

        Each collision draws a brand new random code; after ``max_attempts``
        collisions RetriesExhaustedError is raised. StorageError from the
        store is not retried.
        """
        if not is_valid_http_url(url):
            raise InvalidURLError(url)

        for attempt in range(1, self.max_attempts + 1):
            code = self.generator.generate()
            try:
                link = self.store.create_link(code, url)
            except DuplicateCodeError:
                logger.debug("Code collision on attempt %d: %s", attempt, code)
                continue
            logger.info("Created short link %s -> %s", link.code, link.original_url)
            return self._describe(link)

        logger.error("Gave up after %d colliding codes for %s", self.max_attempts, url)
        raise RetriesExhaustedError(self.max_attempts)

    def info(self, code: str) -> Dict[str, Any]:
        return self._describe(self.store.lookup_link(code))

    def redirect(self, code: str, schedule: Callable[..., Any]) -> str:
        """Returns the target URL and hands the hit to ``schedule``.

        ``schedule(func, *args)`` must run the work without the caller
        waiting on it, e.g. ``BackgroundTasks.add_task``.
        """
        link = self.store.lookup_link(code)
        schedule(self.record_hit, code)
        return link.original_url

    def record_hit(self, code: str):
        try:
            self.store.increment_hits(code)
        except ShortenerError as exc:
            logger.warning("Hit for %s not counted: %s", code, exc)

    def _describe(self, link: Link) -> Dict[str, Any]:
        created_at = link.created_at
        if created_at is not None and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return {
            "code": link.code,
            "original_url": link.original_url,
            "short_url": self.short_url(link.code),
            "created_at": created_at,
            "hits": link.hits,
        }
