import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from shortener.exceptions import (
    DuplicateCodeError,
    InvalidURLError,
    LinkNotFoundError,
    StorageError,
)
from shortener.models import Link

logger = logging.getLogger(__name__)


class LinkStore:
    """Persists links; each call is one atomic unit against one row.

    Uniqueness of codes comes from the primary key and hit counts are
    bumped with a single UPDATE, so concurrent callers never race on a
    read-then-write in this process.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def create_link(self, code: str, original_url: str) -> Link:
        """Inserts a new link with zero hits.

        Raises DuplicateCodeError when the code is taken and StorageError on
        any other database failure.
        """
        if original_url is None:
            raise InvalidURLError("original_url is required")

        link = Link(
            code=code,
            original_url=original_url,
            created_at=datetime.now(timezone.utc),
            hits=0,
        )
        with self.session_factory() as db:
            try:
                db.add(link)
                db.commit()
            except IntegrityError as exc:
                if self._code_taken(db, code):
                    raise DuplicateCodeError(code) from None
                logger.error("Integrity failure inserting link %s: %s", code, exc)
                raise StorageError("Could not insert link") from exc
            except SQLAlchemyError as exc:
                logger.error("Failed to insert link %s: %s", code, exc)
                raise StorageError("Could not insert link") from exc
        return link

    def _code_taken(self, db, code: str) -> bool:
        # the insert failed on a constraint; only an existing row means a collision
        try:
            db.rollback()
            return db.get(Link, code) is not None
        except SQLAlchemyError as exc:
            raise StorageError("Could not check for existing code") from exc

    def lookup_link(self, code: str) -> Link:
        with self.session_factory() as db:
            try:
                link = db.scalars(select(Link).where(Link.code == code).limit(1)).first()
            except SQLAlchemyError as exc:
                logger.error("Failed to look up link %s: %s", code, exc)
                raise StorageError("Could not look up link") from exc
        if link is None:
            logger.debug("No link for code %s", code)
            raise LinkNotFoundError(code)
        return link

    def increment_hits(self, code: str):
        """Adds exactly one hit to the link, inside the database."""
        stmt = (
            update(Link)
            .where(Link.code == code)
            .values(hits=Link.hits + 1)
            .execution_options(synchronize_session=False)
        )
        with self.session_factory() as db:
            try:
                result = db.execute(stmt)
                db.commit()
            except SQLAlchemyError as exc:
                raise StorageError("Could not count hit") from exc
        if result.rowcount == 0:
            raise LinkNotFoundError(code)
